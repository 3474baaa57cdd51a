from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from directus_graph.app.core.errors import SourceError
from directus_graph.app.models.relations import SYSTEM_PREFIX, CollectionInfo, RelationDeclaration
from directus_graph.app.services.sources.base import DirectusSource

logger = logging.getLogger(__name__)

ALL_ROWS = {"limit": -1}


class DirectusClient(DirectusSource):
    """
    Thin async wrapper around the Directus REST API.
    All endpoints live under {url}/{project}; project may be None for
    single-project installs.
    """

    def __init__(
        self,
        url: str,
        project: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = url.rstrip("/") + (f"/{project.strip('/')}" if project else "")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise SourceError(f"Request to {self.base_url}{path} failed: {e}") from e

        if response.status_code >= 400:
            raise SourceError(
                f"Directus returned {response.status_code} for {path}",
                status_code=response.status_code,
                payload=response.text[:500],
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise SourceError(f"Directus returned invalid JSON for {path}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None:
            raise SourceError(f"An error occurred while fetching {path}", payload=payload)
        return data

    async def fetch_collections(self) -> List[CollectionInfo]:
        data = await self._get_data("/collections")
        collections = [
            CollectionInfo.model_validate(c)
            for c in data
            if not c.get("collection", "").startswith(SYSTEM_PREFIX)
        ]
        logger.info(f"Fetched {len(collections)} collections from Directus")
        return collections

    async def fetch_items(self, collection: str) -> List[Dict[str, Any]]:
        items = await self._get_data(f"/items/{collection}", params=ALL_ROWS)
        logger.info(f"Fetched {len(items)} items for {collection}")
        return items

    async def fetch_relations(self) -> List[RelationDeclaration]:
        data = await self._get_data("/relations", params=ALL_ROWS)
        return [RelationDeclaration.model_validate(r) for r in data]

    async def fetch_files(self) -> List[Dict[str, Any]]:
        files = await self._get_data("/files", params=ALL_ROWS)
        logger.info(f"Fetched {len(files)} files from Directus")
        return files
