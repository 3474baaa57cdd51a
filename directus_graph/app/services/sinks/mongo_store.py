from __future__ import annotations

from directus_graph.app.models.runs import ResolutionRun
from directus_graph.app.services.sinks.base import RunStore

try:
    from pymongo import MongoClient
except ImportError:
    MongoClient = None


class MongoRunStore(RunStore):
    def __init__(self, mongo_uri: str, db_name: str):
        if MongoClient is None:
            raise RuntimeError("pymongo is not installed; install pymongo to use run_store=mongo")
        self.client = MongoClient(mongo_uri)
        self.db = self.client[db_name]
        self.col_runs = self.db["resolution_runs"]
        self.col_issues = self.db["resolution_issues"]

    def write_run(self, record: ResolutionRun) -> None:
        # Upsert by run_id; issues are replaced as a whole
        run = record.model_dump(mode="json", exclude={"issues"})
        run["issue_count"] = len(record.issues)
        self.col_runs.replace_one({"run_id": record.run_id}, run, upsert=True)

        self.col_issues.delete_many({"run_id": record.run_id})
        if record.issues:
            self.col_issues.insert_many([i.model_dump(mode="json") for i in record.issues])
