from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# -------------------------------------------------------------------------
# Common Types
# -------------------------------------------------------------------------

IssueLevel = Literal["warning", "error"]
RunStatus = Literal["running", "success", "warning", "failed"]


class ResolutionIssue(BaseModel):
    """
    A recoverable problem met while resolving the graph.
    MongoDB collection: resolution_issues
    """
    run_id: str = ""
    step: str
    level: IssueLevel = "warning"
    message: str
    details: Dict[str, Any] = {}

    model_config = ConfigDict(extra="ignore")


class RunMetrics(BaseModel):
    collections: int = 0
    nodes: int = 0
    file_nodes: int = 0
    files_downloaded: int = 0
    direct_relations: int = 0
    junction_groups: int = 0
    warnings: int = 0
    errors: int = 0


class ResolutionRun(BaseModel):
    """
    MongoDB collection: resolution_runs
    """
    run_id: str
    trigger: Literal["cli", "api", "manual"] = "manual"

    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    status: RunStatus = "running"

    metrics: RunMetrics = Field(default_factory=RunMetrics)
    issues: List[ResolutionIssue] = []
    failure: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
