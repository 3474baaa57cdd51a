from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Optional, Tuple

import httpx

from directus_graph.app.models.records import FileDescriptor, LocalFileRef, file_download_url
from directus_graph.app.services.sinks.base import FileStore

logger = logging.getLogger(__name__)

LOCAL_FILE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "directus-graph/local-file")


def local_file_id(location: str) -> str:
    return str(uuid.uuid5(LOCAL_FILE_NAMESPACE, location))


def target_filename(descriptor: FileDescriptor) -> str:
    name = descriptor.data.get("filename_download") or descriptor.data.get("filename") or "file"
    name = re.sub(r"[^0-9A-Za-z._-]+", "_", str(name))
    return f"{descriptor.origin_id}_{name}"


class HttpDownloader:
    """Fetches file contents from Directus. Shared by the local and MinIO stores."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.client = httpx.AsyncClient(headers=headers, timeout=timeout, transport=transport, follow_redirects=True)

    async def close(self) -> None:
        await self.client.aclose()

    async def fetch(self, descriptor: FileDescriptor) -> Optional[Tuple[bytes, Optional[str]]]:
        url = file_download_url(descriptor, self.base_url)
        if not url:
            logger.warning(f"File {descriptor.origin_id!r} has no download url")
            return None
        response = await self.client.get(url)
        response.raise_for_status()
        return response.content, response.headers.get("content-type")


class LocalFileStore(FileStore):
    def __init__(self, files_dir: Path, downloader: HttpDownloader):
        self.files_dir = Path(files_dir)
        self.downloader = downloader

    async def close(self) -> None:
        await self.downloader.close()

    async def download_remote_file(self, descriptor: FileDescriptor) -> Optional[LocalFileRef]:
        fetched = await self.downloader.fetch(descriptor)
        if fetched is None:
            return None
        content, content_type = fetched

        self.files_dir.mkdir(parents=True, exist_ok=True)
        path = self.files_dir / target_filename(descriptor)
        path.write_bytes(content)
        return LocalFileRef(
            id=local_file_id(str(path)),
            path=str(path),
            content_type=content_type or descriptor.data.get("type"),
            size=len(content),
        )
