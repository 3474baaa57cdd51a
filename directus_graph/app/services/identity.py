from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from directus_graph.app.models.graph import NodeBuilder, NodesByCollection
from directus_graph.app.models.records import RawRecord
from directus_graph.app.services.naming import node_type, type_name_for_collection
from directus_graph.app.services.reporter import Reporter

STEP = "assign_identities"
FILE_TYPE_NAME = "File"

NODE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "directus-graph/node")


def generate_node_id(prefix: str, type_name: str, key: Any) -> str:
    return str(uuid.uuid5(NODE_NAMESPACE, f"{prefix}__{type_name}__{key}"))


def _is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _first_field_value(record: RawRecord) -> Any:
    for name, value in record.data.items():
        if name == "id":
            continue
        return value
    return None


class IdentityAssigner:
    """
    Gives every record a node id derived from its type name and origin id.
    Issued ids are tracked for the whole run so two collections mapped to the
    same type name (or a "files" collection next to the file nodes) never collide.
    """

    def __init__(self, reporter: Reporter, prefix: str = "Directus", exceptions: Optional[Mapping[str, str]] = None):
        self.reporter = reporter
        self.prefix = prefix
        self.exceptions = dict(exceptions or {})
        self._issued: Set[str] = set()

    def assign(self, collections: Mapping[str, Iterable[Any]]) -> NodesByCollection:
        nodes: NodesByCollection = {}
        for name, records in collections.items():
            type_name = type_name_for_collection(name, self.exceptions)
            nodes[name] = self._build(name, type_name, records)
        return nodes

    def assign_files(self, files: Iterable[Any], file_collection: str = "directus_files") -> List[NodeBuilder]:
        return self._build(file_collection, FILE_TYPE_NAME, files)

    def reserve(self, node_ids: Iterable[str]) -> None:
        self._issued.update(node_ids)

    def _build(self, collection: str, type_name: str, records: Iterable[Any]) -> List[NodeBuilder]:
        out: List[NodeBuilder] = []
        for position, item in enumerate(records):
            record = RawRecord.from_item(collection, item)

            key = record.origin_id
            if _is_blank(key):
                # translation tables and the like have no id column
                key = _first_field_value(record)
                if _is_blank(key):
                    key = f"#{position}"

            node_id = generate_node_id(self.prefix, type_name, key)
            if node_id in self._issued:
                self.reporter.warning(
                    STEP,
                    f"Duplicate identity '{key}' in {collection}, disambiguating by position {position}",
                    collection=collection,
                    key=key,
                    position=position,
                )
                node_id = generate_node_id(self.prefix, type_name, f"{key}#{position}")
            self._issued.add(node_id)

            out.append(NodeBuilder(
                node_id=node_id,
                origin_id=None if _is_blank(record.origin_id) else record.origin_id,
                collection=collection,
                node_type=node_type(self.prefix, type_name),
                fields={k: v for k, v in record.data.items() if k != "id"},
            ))
        return out


def assign_identities(
    collections: Mapping[str, Iterable[Any]],
    reporter: Reporter,
    prefix: str = "Directus",
    exceptions: Optional[Mapping[str, str]] = None,
) -> Dict[str, List[NodeBuilder]]:
    return IdentityAssigner(reporter, prefix, exceptions).assign(collections)
