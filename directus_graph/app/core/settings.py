from __future__ import annotations

from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

SourceType = Literal["directus", "snapshot"]
GraphSinkType = Literal["neo4j", "json"]
RunStoreType = Literal["mongo", "json"]
FileStoreType = Literal["local", "minio"]
StaleLegPolicy = Literal["keep_newest", "keep_oldest", "skip"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Backends
    source: SourceType = "directus"
    graph_sink: GraphSinkType = "json"
    run_store: RunStoreType = "json"
    file_store: FileStoreType = "local"

    # Directus
    directus_url: str = "http://localhost:8080"
    directus_project: Optional[str] = "_"
    directus_token: Optional[str] = None
    directus_timeout: float = 30.0
    file_collection: str = "directus_files"

    # Node naming
    node_type_prefix: str = "Directus"
    reference_suffix: str = "___ref"
    # collection name -> node type name, e.g. {"people": "Person"}
    name_exceptions: Dict[str, str] = {}

    # Relation resolution
    # applied when a junction has more than two complete relation legs
    stale_leg_policy: StaleLegPolicy = "keep_newest"

    # Files
    download_files: bool = True
    download_concurrency: int = 8

    # Paths
    # defaulted to relative paths from this file if not set in env
    out_dir: Path = Path(__file__).resolve().parents[2] / "data" / "out"
    files_dir: Path = Path(__file__).resolve().parents[2] / "data" / "files"
    snapshot_path: Optional[Path] = None

    # Mongo
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "directus_graph"

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: Optional[str] = None

    # MinIO
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    minio_bucket_files: str = "directus-files"

    # Run metadata
    run_id: str = ""

    def ensure_out_dirs(self) -> None:
        # Only create directories if using JSON / local backends
        if "json" in (self.run_store, self.graph_sink):
            self.out_dir.mkdir(parents=True, exist_ok=True)
            (self.out_dir / "logs").mkdir(parents=True, exist_ok=True)
        if self.download_files and self.file_store == "local":
            self.files_dir.mkdir(parents=True, exist_ok=True)


def get_settings() -> Settings:
    return Settings()
