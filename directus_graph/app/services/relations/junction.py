from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

from directus_graph.app.core.settings import StaleLegPolicy
from directus_graph.app.models.graph import FileIndex, NodeBuilder, NodesByCollection, OriginIndex
from directus_graph.app.models.relations import RelationDeclaration
from directus_graph.app.services.relations.direct import collection_nodes, require_collection
from directus_graph.app.services.reporter import Reporter

STEP = "resolve_junctions"


def resolve_junctions(
    nodes: NodesByCollection,
    junction_groups: Dict[str, List[RelationDeclaration]],
    file_index: FileIndex,
    reporter: Reporter,
    file_collection: str = "directus_files",
    stale_leg_policy: StaleLegPolicy = "keep_newest",
) -> NodesByCollection:
    """
    Builds many-to-many references from pairs of relation legs sharing a
    junction collection, then drops every junction collection from `nodes`.
    A broken group is reported and skipped; the other groups still resolve.
    """
    for junction, legs in junction_groups.items():
        selected = _select_legs(junction, legs, reporter, stale_leg_policy)
        if selected is None:
            continue
        _resolve_group(nodes, junction, selected, file_index, reporter, file_collection)

    for junction in junction_groups:
        nodes.pop(junction, None)
    return nodes


def _select_legs(
    junction: str,
    legs: List[RelationDeclaration],
    reporter: Reporter,
    policy: StaleLegPolicy,
) -> Optional[List[RelationDeclaration]]:
    if len(legs) % 2:
        reporter.error(
            STEP,
            f"Error while building relations for {junction}: {len(legs)} relation(s) found, "
            "please check your Directus configuration.",
            junction=junction,
            legs=len(legs),
        )

    if len(legs) >= 4:
        # Leftovers of earlier misconfiguration usually have null slots
        complete = [leg for leg in legs if not leg.missing()]
        if len(complete) < 2:
            reporter.error(
                STEP,
                f"Only {len(complete)} complete relation(s) for {junction}, skipping it",
                junction=junction,
                legs=len(legs),
            )
            return None
        if len(complete) > 2:
            if policy == "skip":
                reporter.error(
                    STEP,
                    f"{len(complete)} complete relations for {junction}, cannot tell which pair is current, skipping it",
                    junction=junction,
                    legs=len(complete),
                )
                return None
            kept = complete[-2:] if policy == "keep_newest" else complete[:2]
            reporter.warning(
                STEP,
                f"{len(complete)} complete relations for {junction}, discarded {len(complete) - 2} stale one(s)",
                junction=junction,
                policy=policy,
                kept=[k.describe() for k in kept],
            )
            complete = kept
        legs = complete

    if len(legs) < 2:
        reporter.error(
            STEP,
            f"Relation for {junction} has no counterpart, skipping it",
            junction=junction,
            legs=len(legs),
        )
        return None
    return legs


def _resolve_group(
    nodes: NodesByCollection,
    junction: str,
    legs: List[RelationDeclaration],
    file_index: FileIndex,
    reporter: Reporter,
    file_collection: str,
) -> None:
    first_col = legs[0].collection_one
    second_col = legs[1].collection_one
    if first_col is None or second_col is None:
        reporter.error(
            STEP,
            f"Relation for {junction} has no collection_one, skipping it",
            junction=junction,
        )
        return

    usable = [leg for leg in legs if not leg.missing()]
    if len(usable) < len(legs):
        carriers = sorted({leg.collection_one for leg in usable if leg.collection_one})
        reporter.warning(
            STEP,
            f"Incomplete relation for {junction}, only {', '.join(carriers) or 'no collection'} "
            "will carry the relational field",
            junction=junction,
            dropped=[leg.describe() for leg in legs if leg.missing()],
        )

    reporter.info(STEP, f"Found Many-To-Many relation: {first_col} <-> {second_col}")
    rows = require_collection(nodes, junction, legs[0])

    for leg in usable:
        target_col = leg.collection_one
        other_col = second_col if target_col == first_col else first_col
        targets = OriginIndex(collection_nodes(nodes, target_col, file_index, file_collection, leg))
        others = None if other_col == file_collection else OriginIndex(require_collection(nodes, other_col, leg))
        clashes: Set[str] = set()

        for row in rows:
            target_key = row.raw(leg.field_many)
            value_key = row.raw(leg.junction_field)
            if target_key is None or value_key is None:
                continue

            value_id = _lookup_id(others, file_index, value_key)
            if value_id is None:
                reporter.warning(
                    STEP,
                    f"No {other_col} item with id {value_key!r} for {junction}.{leg.junction_field}",
                    junction=junction,
                    collection=other_col,
                    value=value_key,
                )
                continue

            target = targets.get(target_key)
            if target is None:
                reporter.warning(
                    STEP,
                    f"No {target_col} item with id {target_key!r} for {junction}.{leg.field_many}",
                    junction=junction,
                    collection=target_col,
                    value=target_key,
                )
                continue

            if not target.append_reference(leg.field_one, value_id) and target.node_id not in clashes:
                clashes.add(target.node_id)
                reporter.warning(
                    STEP,
                    f"{target_col}.{leg.field_one} already holds a single reference, "
                    f"not adding the {junction} values to it",
                    junction=junction,
                    collection=target_col,
                    field=leg.field_one,
                    node_id=target.node_id,
                )


def _lookup_id(others: Optional[OriginIndex], file_index: FileIndex, key: Any) -> Optional[str]:
    if others is None:
        return file_index.node_id_for(key)
    node: Optional[NodeBuilder] = others.get(key)
    return node.node_id if node else None
