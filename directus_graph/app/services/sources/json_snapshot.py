from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from directus_graph.app.core.errors import SourceError
from directus_graph.app.models.relations import CollectionInfo, RelationDeclaration
from directus_graph.app.services.sources.base import DirectusSource


class JsonSnapshotSource(DirectusSource):
    """
    Reads a dump of the Directus responses from disk:
    {"collections": [...], "items": {name: [...]}, "relations": [...], "files": [...]}
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._payload: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._payload is None:
            if not self.path.exists():
                raise SourceError(f"Snapshot file not found: {self.path}")
            try:
                payload = json.loads(self.path.read_text("utf-8"))
            except ValueError as e:
                raise SourceError(f"Snapshot file {self.path} is not valid JSON: {e}") from e
            if not isinstance(payload, dict):
                raise SourceError(f"Snapshot file {self.path} must contain a JSON object")
            self._payload = payload
        return self._payload

    async def fetch_collections(self) -> List[CollectionInfo]:
        entries = self._load().get("collections")
        if entries is None:
            # items-only snapshots: no field metadata
            entries = [{"collection": name} for name in self._load().get("items", {})]
        return [CollectionInfo.model_validate(c) for c in entries]

    async def fetch_items(self, collection: str) -> List[Dict[str, Any]]:
        return list(self._load().get("items", {}).get(collection, []))

    async def fetch_relations(self) -> List[RelationDeclaration]:
        return [RelationDeclaration.model_validate(r) for r in self._load().get("relations", [])]

    async def fetch_files(self) -> List[Dict[str, Any]]:
        return list(self._load().get("files", []))
