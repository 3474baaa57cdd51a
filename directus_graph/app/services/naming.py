from __future__ import annotations

from typing import Mapping, Optional

import inflect

_inflect = inflect.engine()


def type_name_for_collection(name: str, exceptions: Optional[Mapping[str, str]] = None) -> str:
    """
    Transforms a collection name into a node type name: singular, first letter
    upper-cased. An entry in `exceptions` is used as-is instead.
    """
    if exceptions and name in exceptions:
        return exceptions[name]

    node_name = name
    # singular_noun returns False when the word is already singular
    singular = _inflect.singular_noun(node_name) if node_name else False
    if singular:
        node_name = singular

    return node_name[:1].upper() + node_name[1:]


def node_type(prefix: str, type_name: str) -> str:
    return f"{prefix}{type_name}"
