from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from directus_graph.app.models.records import LocalFileRef

Reference = Union[str, List[str]]

DEFAULT_REFERENCE_SUFFIX = "___ref"


@dataclass
class NodeBuilder:
    """Mutable node between the identity pass and the final freeze."""
    node_id: str
    origin_id: Any
    collection: str
    node_type: str
    fields: Dict[str, Any]
    references: Dict[str, Reference] = field(default_factory=dict)

    def raw(self, name: str) -> Any:
        return self.fields.get(name)

    def consume(self, name: str) -> None:
        self.fields.pop(name, None)

    def set_reference(self, name: str, value: Reference) -> None:
        self.references[name] = value

    def append_reference(self, name: str, node_id: str) -> bool:
        """Returns False, leaving the node as is, when `name` holds a single reference."""
        current = self.references.get(name)
        if current is None:
            self.references[name] = [node_id]
        elif isinstance(current, list):
            current.append(node_id)
        else:
            return False
        return True

    def freeze(self) -> ResolvedNode:
        refs = {k: list(v) if isinstance(v, list) else v for k, v in self.references.items()}
        return ResolvedNode(
            node_id=self.node_id,
            origin_id=self.origin_id,
            collection=self.collection,
            node_type=self.node_type,
            fields=MappingProxyType(dict(self.fields)),
            references=MappingProxyType(refs),
        )


@dataclass(frozen=True)
class ResolvedNode:
    node_id: str
    origin_id: Any
    collection: str
    node_type: str
    fields: Mapping[str, Any]
    references: Mapping[str, Reference]

    def to_dict(self, reference_suffix: str = DEFAULT_REFERENCE_SUFFIX) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.node_id, "directus_id": self.origin_id}
        out.update(self.fields)
        for name, ref in self.references.items():
            out[f"{name}{reference_suffix}"] = list(ref) if isinstance(ref, list) else ref
        out["internal"] = {"type": self.node_type, "collection": self.collection}
        return out


NodesByCollection = Dict[str, List[NodeBuilder]]


class OriginIndex:
    """Lookup of nodes by origin id. The first node wins on duplicate ids."""

    def __init__(self, nodes: Iterable[NodeBuilder]):
        self._by_origin: Dict[Any, NodeBuilder] = {}
        for n in nodes:
            if n.origin_id is None:
                continue
            try:
                self._by_origin.setdefault(n.origin_id, n)
            except TypeError:
                continue

    def get(self, origin_id: Any) -> Optional[NodeBuilder]:
        if origin_id is None:
            return None
        try:
            return self._by_origin.get(origin_id)
        except TypeError:
            # unhashable raw values (nested objects) never match an origin id
            return None


@dataclass
class FileEntry:
    origin_id: Any
    node: NodeBuilder
    local_ref: Optional[LocalFileRef] = None

    @property
    def node_id(self) -> str:
        return self.node.node_id


class FileIndex:
    """origin id -> file node, kept only while relations and file fields are resolved."""

    def __init__(self, entries: Iterable[FileEntry] = ()):
        self._entries: Dict[Any, FileEntry] = {}
        self._order: List[FileEntry] = []
        for e in entries:
            self.add(e)

    @classmethod
    def from_nodes(cls, nodes: Iterable[NodeBuilder]) -> FileIndex:
        return cls(FileEntry(origin_id=n.origin_id, node=n) for n in nodes)

    def add(self, entry: FileEntry) -> None:
        self._order.append(entry)
        if entry.origin_id is not None:
            self._entries.setdefault(entry.origin_id, entry)

    def get(self, origin_id: Any) -> Optional[FileEntry]:
        if origin_id is None:
            return None
        try:
            return self._entries.get(origin_id)
        except TypeError:
            return None

    def node_id_for(self, origin_id: Any) -> Optional[str]:
        entry = self.get(origin_id)
        return entry.node_id if entry else None

    @property
    def nodes(self) -> List[NodeBuilder]:
        return [e.node for e in self._order]

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)


@dataclass
class ResolvedGraph:
    nodes_by_collection: Dict[str, List[ResolvedNode]]
    files: List[ResolvedNode] = field(default_factory=list)

    def iter_nodes(self) -> Iterator[ResolvedNode]:
        for nodes in self.nodes_by_collection.values():
            yield from nodes
        yield from self.files

    def node_count(self) -> int:
        return sum(len(v) for v in self.nodes_by_collection.values()) + len(self.files)

    def to_dict(self, reference_suffix: str = DEFAULT_REFERENCE_SUFFIX) -> Dict[str, Any]:
        return {
            "collections": {
                name: [n.to_dict(reference_suffix) for n in nodes]
                for name, nodes in self.nodes_by_collection.items()
            },
            "files": [n.to_dict(reference_suffix) for n in self.files],
        }
