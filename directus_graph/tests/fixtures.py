"""
Test helpers for looking up resolved nodes and building small snapshots.
"""

import json
from pathlib import Path

from directus_graph.app.models.records import Snapshot

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
EXAMPLE_SNAPSHOT = DATA_DIR / "example_snapshot.json"


def load_example_payload():
    return json.loads(EXAMPLE_SNAPSHOT.read_text("utf-8"))


def by_origin(nodes, origin_id):
    """Returns the node with the given origin id, failing the test when absent."""
    for node in nodes:
        if node.origin_id == origin_id:
            return node
    raise AssertionError(f"no node with origin id {origin_id!r}")


def by_name(nodes, name):
    for node in nodes:
        if node.fields.get("name") == name:
            return node
    raise AssertionError(f"no node named {name!r}")


def snapshot(items, relations=(), files=(), collections=None):
    payload = {"items": items, "relations": list(relations), "files": list(files)}
    if collections is not None:
        payload["collections"] = collections
    return Snapshot.from_payload(payload)


# Small movie dataset, items only
MOVIES = [
    {"id": 0, "name": "Titanic"},
    {"id": 1, "name": "Romeo & Juliet", "directors": 1},
    {"id": 2, "name": "Bambi", "directors": 1},
    {"id": 4, "name": "Wall-E", "directors": 0},
]
DIRECTORS = [
    {"id": 0, "name": "John Smith"},
    {"id": 1, "name": "Mary Sue"},
    {"id": 2, "name": "Walt Disney"},
]
GENRES = [
    {"id": 0, "name": "Sci-fi"},
    {"id": 1, "name": "Comedy"},
]

MOVIES_DIRECTORS = {
    "collection_many": "movies",
    "field_many": "directors",
    "collection_one": "directors",
    "field_one": "movies",
    "junction_field": None,
}


def genre_legs(junction="movies_genres"):
    return [
        {
            "collection_many": junction,
            "field_many": "movie",
            "collection_one": "movies",
            "field_one": "genres",
            "junction_field": "genre",
        },
        {
            "collection_many": junction,
            "field_many": "genre",
            "collection_one": "genres",
            "field_one": "movies",
            "junction_field": "movie",
        },
    ]
