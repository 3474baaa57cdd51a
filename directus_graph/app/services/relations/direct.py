from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from directus_graph.app.core.errors import MissingCollectionError
from directus_graph.app.models.graph import FileIndex, NodeBuilder, NodesByCollection, OriginIndex
from directus_graph.app.models.relations import DirectRelation
from directus_graph.app.services.reporter import Reporter

STEP = "link_direct"


def require_collection(nodes: NodesByCollection, name: str, relation: Any) -> List[NodeBuilder]:
    if name not in nodes:
        raise MissingCollectionError(name, relation)
    return nodes[name]


def collection_nodes(
    nodes: NodesByCollection,
    name: str,
    file_index: FileIndex,
    file_collection: str,
    relation: Any,
) -> List[NodeBuilder]:
    # file nodes live in the file index, not in the collections
    if name == file_collection and name not in nodes:
        return file_index.nodes
    return require_collection(nodes, name, relation)


def _group_by_raw(nodes: Iterable[NodeBuilder], field: str) -> Dict[Any, List[NodeBuilder]]:
    groups: Dict[Any, List[NodeBuilder]] = {}
    for n in nodes:
        value = n.raw(field)
        if value is None:
            continue
        try:
            groups.setdefault(value, []).append(n)
        except TypeError:
            continue
    return groups


def _matches(groups: Dict[Any, List[NodeBuilder]], origin_id: Any) -> List[NodeBuilder]:
    if origin_id is None:
        return []
    try:
        return groups.get(origin_id, [])
    except TypeError:
        return []


def link_direct(
    nodes: NodesByCollection,
    relations: Iterable[DirectRelation],
    reporter: Reporter,
    file_index: Optional[FileIndex] = None,
    file_collection: str = "directus_files",
) -> NodesByCollection:
    """
    Applies many-to-one relations in declaration order. The "one" side gets a
    list of the matching "many" node ids; each "many" node swaps its raw
    foreign key for a reference to the "one" node.

    Relations to the file collection are resolved against `file_index`. A
    relation without field_one only updates the "many" side.
    """
    file_index = file_index if file_index is not None else FileIndex()
    for rel in relations:
        co, fo = rel.collection_one, rel.field_one
        cm, fm = rel.collection_many, rel.field_many
        one_nodes = collection_nodes(nodes, co, file_index, file_collection, rel)
        many_nodes = collection_nodes(nodes, cm, file_index, file_collection, rel)
        reporter.info(STEP, f"Found One-To-Many relation: {co} -> {cm}")

        # One side: matched on origin id since the many side still holds raw keys
        if fo is not None:
            by_key = _group_by_raw(many_nodes, fm)
            for node in one_nodes:
                node.set_reference(fo, [m.node_id for m in _matches(by_key, node.origin_id)])

        # Many side
        one_index = OriginIndex(one_nodes)
        for node in many_nodes:
            raw = node.raw(fm)
            if raw is None:
                continue
            target = one_index.get(raw)
            if target is None:
                reporter.warning(
                    STEP,
                    f"No {co} item with id {raw!r} for {cm}.{fm}",
                    collection=cm,
                    field=fm,
                    node_id=node.node_id,
                    value=raw,
                )
                continue
            node.set_reference(fm, target.node_id)
            node.consume(fm)

    return nodes
