from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from directus_graph.app.core.errors import SnapshotShapeError
from directus_graph.app.models.relations import CollectionInfo, RelationDeclaration


@dataclass(frozen=True)
class RawRecord:
    collection: str
    origin_id: Any
    data: Mapping[str, Any]

    @classmethod
    def from_item(cls, collection: str, item: Any) -> RawRecord:
        if isinstance(item, RawRecord):
            return item
        if not isinstance(item, Mapping):
            raise SnapshotShapeError(
                f"Item of collection '{collection}' is {type(item).__name__}, expected a mapping of fields"
            )
        return cls(collection=collection, origin_id=item.get("id"), data=MappingProxyType(dict(item)))


# Files are plain records of the reserved file collection.
FileDescriptor = RawRecord


def file_download_url(descriptor: FileDescriptor, base_url: str = "") -> Optional[str]:
    # Directus 7 nests the asset urls under "data"
    nested = descriptor.data.get("data")
    url = None
    if isinstance(nested, Mapping):
        url = nested.get("full_url") or nested.get("url")
    url = url or descriptor.data.get("full_url") or descriptor.data.get("url")
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    return base_url.rstrip("/") + "/" + url.lstrip("/")


@dataclass(frozen=True)
class LocalFileRef:
    id: str
    path: str
    content_type: Optional[str] = None
    size: Optional[int] = None


@dataclass
class Snapshot:
    collections: Dict[str, List[RawRecord]]
    relations: List[RelationDeclaration] = field(default_factory=list)
    files: List[FileDescriptor] = field(default_factory=list)
    catalogue: Dict[str, CollectionInfo] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], file_collection: str = "directus_files") -> Snapshot:
        """
        Builds a snapshot from the raw Directus responses.

        payload format:
            {"collections": [...], "items": {name: [...]}, "relations": [...], "files": [...]}
        """
        catalogue: Dict[str, CollectionInfo] = {}
        for entry in payload.get("collections") or []:
            info = CollectionInfo.model_validate(entry)
            catalogue[info.collection] = info

        items = payload.get("items") or {}
        if not isinstance(items, Mapping):
            raise SnapshotShapeError("'items' must map collection names to lists of items")

        collections: Dict[str, List[RawRecord]] = {}
        for name, rows in items.items():
            if not isinstance(rows, list):
                raise SnapshotShapeError(f"Items of collection '{name}' must be a list")
            collections[name] = [RawRecord.from_item(name, row) for row in rows]

        relations = [RelationDeclaration.model_validate(r) for r in payload.get("relations") or []]
        files = [RawRecord.from_item(file_collection, f) for f in payload.get("files") or []]
        return cls(collections=collections, relations=relations, files=files, catalogue=catalogue)
