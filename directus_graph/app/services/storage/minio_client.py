from __future__ import annotations

import asyncio
import io
import logging
from typing import Optional

from minio import Minio
from minio.error import S3Error

from directus_graph.app.models.records import FileDescriptor, LocalFileRef
from directus_graph.app.services.sinks.base import FileStore
from directus_graph.app.services.storage.local_files import HttpDownloader, local_file_id, target_filename

logger = logging.getLogger(__name__)


class MinioFileStore(FileStore):
    """Downloads Directus files and keeps them in a MinIO bucket instead of on disk."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket_name: str,
        downloader: HttpDownloader,
        secure: bool = False,
    ):
        self.client = Minio(endpoint, access_key=access_key, secret_key=secret_key, secure=secure)
        self.bucket_name = bucket_name
        self.downloader = downloader
        self._bucket_ready = False

    async def close(self) -> None:
        await self.downloader.close()

    def _ensure_bucket(self) -> None:
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(self.bucket_name):
            self.client.make_bucket(self.bucket_name)
        self._bucket_ready = True

    def _put(self, name: str, content: bytes, content_type: str) -> None:
        self._ensure_bucket()
        self.client.put_object(
            self.bucket_name,
            name,
            io.BytesIO(content),
            len(content),
            content_type=content_type,
        )

    async def download_remote_file(self, descriptor: FileDescriptor) -> Optional[LocalFileRef]:
        fetched = await self.downloader.fetch(descriptor)
        if fetched is None:
            return None
        content, content_type = fetched
        content_type = content_type or descriptor.data.get("type") or "application/octet-stream"

        name = target_filename(descriptor)
        try:
            # the minio client is blocking
            await asyncio.to_thread(self._put, name, content, content_type)
        except S3Error as err:
            logger.error(f"[Minio] Upload failed for {name}: {err}")
            return None

        location = f"minio://{self.bucket_name}/{name}"
        return LocalFileRef(id=local_file_id(location), path=location, content_type=content_type, size=len(content))
