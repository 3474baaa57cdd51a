from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from directus_graph.app.models.records import RawRecord, Snapshot
from directus_graph.app.models.relations import CollectionInfo, RelationDeclaration

logger = logging.getLogger(__name__)


class DirectusSource(ABC):
    @abstractmethod
    async def fetch_collections(self) -> List[CollectionInfo]: ...

    @abstractmethod
    async def fetch_items(self, collection: str) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def fetch_relations(self) -> List[RelationDeclaration]: ...

    @abstractmethod
    async def fetch_files(self) -> List[Dict[str, Any]]: ...

    async def close(self) -> None:
        pass

    async def fetch_snapshot(self, file_collection: str = "directus_files") -> Snapshot:
        collections = await self.fetch_collections()
        names = [c.collection for c in collections if c.collection != file_collection]

        # items of each collection are independent, fetch order does not matter
        item_lists, relations, files = await asyncio.gather(
            asyncio.gather(*(self.fetch_items(n) for n in names)),
            self.fetch_relations(),
            self.fetch_files(),
        )

        kept = [r for r in relations if not r.is_system(file_collection)]
        if len(kept) < len(relations):
            logger.info(f"Ignoring {len(relations) - len(kept)} relations of Directus system collections")

        return Snapshot(
            collections={
                name: [RawRecord.from_item(name, item) for item in items]
                for name, items in zip(names, item_lists)
            },
            relations=kept,
            files=[RawRecord.from_item(file_collection, f) for f in files],
            catalogue={c.collection: c for c in collections},
        )
