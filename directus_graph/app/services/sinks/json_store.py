from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from directus_graph.app.models.graph import DEFAULT_REFERENCE_SUFFIX, ResolvedNode
from directus_graph.app.models.runs import ResolutionRun
from directus_graph.app.services.sinks.base import GraphSink, RunStore


def jsonencoder(o: Any) -> Any:
    if isinstance(o, datetime):
        return o.isoformat()
    return str(o)


def jsonl_append(path: Path, obj: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(obj, default=jsonencoder, ensure_ascii=False) + "\n")


class JsonRunStore(RunStore):
    def __init__(self, out_dir: Path):
        self.run_path = out_dir / "resolution_runs.jsonl"
        self.issues_path = out_dir / "logs" / "resolution_issues.jsonl"

    def write_run(self, record: ResolutionRun) -> None:
        run = record.model_dump(mode="json", exclude={"issues"})
        run["issue_count"] = len(record.issues)
        jsonl_append(self.run_path, run)
        for issue in record.issues:
            jsonl_append(self.issues_path, issue.model_dump(mode="json"))


class JsonGraphSink(GraphSink):
    def __init__(self, out_dir: Path, reference_suffix: str = DEFAULT_REFERENCE_SUFFIX):
        self.path_nodes = out_dir / "graph_nodes.jsonl"
        self.snapshot_path = out_dir / "graph_snapshot.json"
        self.reference_suffix = reference_suffix

        # In-memory snapshot, written on close
        self.nodes: List[Dict[str, Any]] = []

    def close(self) -> None:
        self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        self.snapshot_path.write_text(
            json.dumps({"nodes": self.nodes}, indent=2, default=jsonencoder, ensure_ascii=False),
            encoding="utf-8",
        )

    def register_node(self, node: ResolvedNode) -> None:
        record = node.to_dict(self.reference_suffix)
        jsonl_append(self.path_nodes, record)
        self.nodes.append(record)
