from __future__ import annotations

from typing import Optional

from directus_graph.app.models.graph import ResolvedNode
from directus_graph.app.models.records import FileDescriptor, LocalFileRef
from directus_graph.app.models.runs import ResolutionRun


class GraphSink:
    def close(self) -> None:
        pass

    def register_node(self, node: ResolvedNode) -> None:
        raise NotImplementedError


class RunStore:
    def write_run(self, record: ResolutionRun) -> None:
        raise NotImplementedError


class FileStore:
    async def close(self) -> None:
        pass

    async def download_remote_file(self, descriptor: FileDescriptor) -> Optional[LocalFileRef]:
        raise NotImplementedError
