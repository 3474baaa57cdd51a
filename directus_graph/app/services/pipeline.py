from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Literal, Optional, Tuple

from directus_graph.app.core.errors import GraphSourceError
from directus_graph.app.core.settings import Settings
from directus_graph.app.models.graph import ResolvedGraph
from directus_graph.app.models.runs import ResolutionRun
from directus_graph.app.services.files import build_file_index
from directus_graph.app.services.identity import IdentityAssigner
from directus_graph.app.services.reporter import Reporter
from directus_graph.app.services.resolver import resolve_snapshot
from directus_graph.app.services.sinks.base import FileStore, GraphSink, RunStore
from directus_graph.app.services.sinks.factory import create_sinks, create_source
from directus_graph.app.services.sources.base import DirectusSource

logger = logging.getLogger(__name__)


class GraphSyncPipeline:
    def __init__(
        self,
        settings: Settings,
        source: Optional[DirectusSource] = None,
        sinks: Optional[Tuple[GraphSink, RunStore, Optional[FileStore]]] = None,
        trigger: Literal["cli", "api", "manual"] = "manual",
    ):
        self.settings = settings
        self.settings.ensure_out_dirs()
        self.run_id = settings.run_id or str(uuid.uuid4())
        self.reporter = Reporter(self.run_id)

        self.source = source or create_source(settings)
        self.graph, self.runs, self.files = sinks or create_sinks(settings)

        self.run_record = ResolutionRun(run_id=self.run_id, trigger=trigger)

    async def close(self) -> None:
        await self.source.close()
        if self.files is not None:
            await self.files.close()
        self.graph.close()

    async def run(self) -> ResolutionRun:
        try:
            graph = await self._resolve()
        except GraphSourceError as e:
            logger.error(f"Graph sync {self.run_id} failed: {e}")
            self.run_record.failure = str(e)
            self._finish("failed")
            raise

        for node in graph.iter_nodes():
            self.graph.register_node(node)

        metrics = self.run_record.metrics
        metrics.collections = len(graph.nodes_by_collection)
        metrics.nodes = graph.node_count()
        metrics.file_nodes = len(graph.files)
        metrics.warnings = len(self.reporter.warnings)
        metrics.errors = len(self.reporter.errors)
        self._finish("warning" if self.reporter.issues else "success")
        logger.info(
            f"Registered {metrics.nodes} nodes from {metrics.collections} collections "
            f"({metrics.warnings} warnings, {metrics.errors} errors)"
        )
        return self.run_record

    async def _resolve(self) -> ResolvedGraph:
        s = self.settings
        snapshot = await self.source.fetch_snapshot(s.file_collection)
        logger.info(f"Fetched {len(snapshot.collections)} collections and {len(snapshot.files)} files")

        assigner = IdentityAssigner(self.reporter, s.node_type_prefix, s.name_exceptions)
        file_nodes = assigner.assign_files(snapshot.files, s.file_collection)
        resolver = self.files.download_remote_file if self.files is not None else None
        file_index = await build_file_index(
            snapshot.files, file_nodes, resolver, self.reporter, concurrency=s.download_concurrency
        )
        self.run_record.metrics.files_downloaded = sum(1 for e in file_index if e.local_ref is not None)

        graph = resolve_snapshot(snapshot, s, self.reporter, file_index=file_index, assigner=assigner)
        self.run_record.metrics.direct_relations = sum(1 for r in snapshot.relations if r.is_direct)
        self.run_record.metrics.junction_groups = len(
            {r.collection_many for r in snapshot.relations if not r.is_direct and r.collection_many}
        )
        return graph

    def _finish(self, status: Literal["success", "warning", "failed"]) -> None:
        self.run_record.status = status
        self.run_record.finished_at = datetime.utcnow()
        self.run_record.issues = list(self.reporter.issues)
        self.runs.write_run(self.run_record)
