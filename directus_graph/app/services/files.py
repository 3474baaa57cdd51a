from __future__ import annotations

import asyncio
from typing import AbstractSet, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from directus_graph.app.models.graph import FileEntry, FileIndex, NodeBuilder, NodesByCollection
from directus_graph.app.models.records import FileDescriptor, LocalFileRef
from directus_graph.app.models.relations import CollectionInfo
from directus_graph.app.services.reporter import Reporter

FILE_FIELD_TYPE = "file"
LOCAL_FILE_FIELD = "localFile"

FileResolver = Callable[[FileDescriptor], Awaitable[Optional[LocalFileRef]]]


async def build_file_index(
    descriptors: Sequence[FileDescriptor],
    file_nodes: Sequence[NodeBuilder],
    resolver: Optional[FileResolver],
    reporter: Reporter,
    concurrency: int = 8,
) -> FileIndex:
    """
    Downloads every file through `resolver` (unordered, at most `concurrency`
    at a time) and indexes the file nodes by origin id. A failed download is
    reported and leaves the file node without a local file.
    """
    if len(descriptors) != len(file_nodes):
        raise ValueError("descriptors and file_nodes must line up one to one")
    if resolver is None:
        return FileIndex.from_nodes(file_nodes)

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _resolve(descriptor: FileDescriptor, node: NodeBuilder) -> FileEntry:
        async with semaphore:
            try:
                local_ref = await resolver(descriptor)
            except Exception as e:
                reporter.error(
                    "download_files",
                    f"An error occurred while downloading file {descriptor.origin_id!r}: {e}",
                    origin_id=descriptor.origin_id,
                    error=str(e),
                )
                return FileEntry(origin_id=node.origin_id, node=node)
        if local_ref is None:
            reporter.error(
                "download_files",
                f"File {descriptor.origin_id!r} could not be downloaded",
                origin_id=descriptor.origin_id,
            )
        else:
            node.set_reference(LOCAL_FILE_FIELD, local_ref.id)
        return FileEntry(origin_id=node.origin_id, node=node, local_ref=local_ref)

    entries = await asyncio.gather(*(_resolve(d, n) for d, n in zip(descriptors, file_nodes)))
    return FileIndex(entries)


def map_files(
    file_index: FileIndex,
    catalogue: Dict[str, CollectionInfo],
    nodes: NodesByCollection,
    reporter: Reporter,
    linked: AbstractSet[Tuple[str, str]] = frozenset(),
) -> NodesByCollection:
    """
    Rewrites every file-typed field into a reference to the file node.
    (collection, field) pairs in `linked` are skipped.
    """
    file_fields: List[Tuple[str, str]] = []
    for name, info in catalogue.items():
        for field_name in info.fields_of_type(FILE_FIELD_TYPE):
            if (name, field_name) not in linked:
                file_fields.append((name, field_name))

    for collection, field_name in file_fields:
        # junction collections are gone by now
        for node in nodes.get(collection, []):
            raw = node.raw(field_name)
            if raw is None:
                continue
            file_id = file_index.node_id_for(raw)
            if file_id is None:
                reporter.warning(
                    "map_files",
                    f"No file with id {raw!r} for {collection}.{field_name}",
                    collection=collection,
                    field=field_name,
                    node_id=node.node_id,
                    value=raw,
                )
                continue
            node.set_reference(field_name, file_id)
            node.consume(field_name)
    return nodes
