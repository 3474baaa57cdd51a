from __future__ import annotations

from typing import Any, Optional


class GraphSourceError(Exception):
    """Base class for errors that end a graph sync run."""


class SourceError(GraphSourceError):
    """The Directus API (or snapshot file) did not return usable data."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class SnapshotShapeError(GraphSourceError):
    """A fetched record does not have the shape of an item (mapping of fields)."""


class MissingCollectionError(GraphSourceError):
    """A relation references a collection that is not part of the fetched snapshot."""

    def __init__(self, collection: str, relation: Any = None):
        super().__init__(f"Collection '{collection}' referenced by a relation is not in the snapshot")
        self.collection = collection
        self.relation = relation
