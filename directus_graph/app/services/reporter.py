from __future__ import annotations

import logging
from typing import Any, List, Optional

from directus_graph.app.models.runs import IssueLevel, ResolutionIssue

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"warning": logging.WARNING, "error": logging.ERROR}


class Reporter:
    """
    Collects warnings and errors of a resolution run as ResolutionIssue values
    and mirrors them to the logger. Every resolution component gets one passed in.
    """

    def __init__(self, run_id: str = "", log: Optional[logging.Logger] = None):
        self.run_id = run_id
        self.issues: List[ResolutionIssue] = []
        self._logger = log or logger

    def info(self, step: str, message: str, **details: Any) -> None:
        self._logger.info(f"[{step}] {message}")

    def warning(self, step: str, message: str, **details: Any) -> ResolutionIssue:
        return self._record("warning", step, message, details)

    def error(self, step: str, message: str, **details: Any) -> ResolutionIssue:
        return self._record("error", step, message, details)

    def _record(self, level: IssueLevel, step: str, message: str, details: dict) -> ResolutionIssue:
        issue = ResolutionIssue(run_id=self.run_id, step=step, level=level, message=message, details=details)
        self.issues.append(issue)
        self._logger.log(_LOG_LEVELS[level], f"[{step}] {message}")
        return issue

    @property
    def warnings(self) -> List[ResolutionIssue]:
        return [i for i in self.issues if i.level == "warning"]

    @property
    def errors(self) -> List[ResolutionIssue]:
        return [i for i in self.issues if i.level == "error"]

    def for_step(self, step: str) -> List[ResolutionIssue]:
        return [i for i in self.issues if i.step == step]
