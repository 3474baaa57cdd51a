from __future__ import annotations

from typing import Optional

from directus_graph.app.core.settings import Settings
from directus_graph.app.models.graph import FileIndex, ResolvedGraph
from directus_graph.app.models.records import Snapshot
from directus_graph.app.services.files import map_files
from directus_graph.app.services.identity import IdentityAssigner
from directus_graph.app.services.relations.classifier import classify
from directus_graph.app.services.relations.direct import link_direct
from directus_graph.app.services.relations.junction import resolve_junctions
from directus_graph.app.services.reporter import Reporter


def resolve_snapshot(
    snapshot: Snapshot,
    settings: Settings,
    reporter: Reporter,
    file_index: Optional[FileIndex] = None,
    assigner: Optional[IdentityAssigner] = None,
) -> ResolvedGraph:
    """
    Turns a complete snapshot into the node graph:
    identities -> classify -> direct relations -> junctions -> file fields.

    Pass `file_index` (and the `assigner` that created its nodes) when the
    files were already identified and downloaded; otherwise file nodes are
    created here without local files.
    """
    if assigner is None:
        assigner = IdentityAssigner(reporter, settings.node_type_prefix, settings.name_exceptions)

    if file_index is None:
        file_index = FileIndex.from_nodes(assigner.assign_files(snapshot.files, settings.file_collection))
    else:
        assigner.reserve(n.node_id for n in file_index.nodes)

    collections = {k: v for k, v in snapshot.collections.items() if k != settings.file_collection}
    nodes = assigner.assign(collections)

    relations = [r for r in snapshot.relations if not r.is_system(settings.file_collection)]
    classified = classify(relations, reporter, file_collection=settings.file_collection)
    link_direct(nodes, classified.direct, reporter, file_index, file_collection=settings.file_collection)
    resolve_junctions(
        nodes,
        classified.junction_groups,
        file_index,
        reporter,
        file_collection=settings.file_collection,
        stale_leg_policy=settings.stale_leg_policy,
    )
    # file fields declared as relations were already linked (or reported) above
    linked = {
        (r.collection_many, r.field_many) for r in classified.direct if r.collection_one == settings.file_collection
    }
    map_files(file_index, snapshot.catalogue, nodes, reporter, linked=linked)

    return ResolvedGraph(
        nodes_by_collection={name: [n.freeze() for n in items] for name, items in nodes.items()},
        files=[n.freeze() for n in file_index.nodes],
    )
