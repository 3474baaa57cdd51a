from __future__ import annotations

from typing import Optional, Tuple

from directus_graph.app.core.settings import Settings
from directus_graph.app.services.sinks.base import FileStore, GraphSink, RunStore
from directus_graph.app.services.sinks.json_store import JsonGraphSink, JsonRunStore
from directus_graph.app.services.sinks.mongo_store import MongoRunStore
from directus_graph.app.services.sinks.neo4j_sink import Neo4jGraphSink
from directus_graph.app.services.sources.base import DirectusSource
from directus_graph.app.services.sources.directus_client import DirectusClient
from directus_graph.app.services.sources.json_snapshot import JsonSnapshotSource
from directus_graph.app.services.storage.local_files import HttpDownloader, LocalFileStore
from directus_graph.app.services.storage.minio_client import MinioFileStore


def create_source(settings: Settings) -> DirectusSource:
    if settings.source == "snapshot":
        if settings.snapshot_path is None:
            raise ValueError("snapshot_path is required when source=snapshot")
        return JsonSnapshotSource(settings.snapshot_path)
    return DirectusClient(
        settings.directus_url,
        project=settings.directus_project,
        token=settings.directus_token,
        timeout=settings.directus_timeout,
    )


def create_sinks(settings: Settings) -> Tuple[GraphSink, RunStore, Optional[FileStore]]:
    # Run / issue store
    if settings.run_store == "mongo":
        run_store: RunStore = MongoRunStore(settings.mongo_uri, settings.mongo_db)
    else:
        run_store = JsonRunStore(settings.out_dir)

    # Graph Sink
    if settings.graph_sink == "json":
        graph_sink: GraphSink = JsonGraphSink(settings.out_dir, settings.reference_suffix)
    else:
        graph_sink = Neo4jGraphSink(
            uri=settings.neo4j_uri,
            user=settings.neo4j_user,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
        )

    # File store
    file_store: Optional[FileStore] = None
    if settings.download_files:
        downloader = HttpDownloader(settings.directus_url, token=settings.directus_token)
        if settings.file_store == "minio":
            file_store = MinioFileStore(
                settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                bucket_name=settings.minio_bucket_files,
                downloader=downloader,
                secure=settings.minio_secure,
            )
        else:
            file_store = LocalFileStore(settings.files_dir, downloader)

    return graph_sink, run_store, file_store
