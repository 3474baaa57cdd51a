from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from directus_graph.app.models.graph import ResolvedNode
from directus_graph.app.services.sinks.base import GraphSink

try:
    from neo4j import GraphDatabase
except ImportError:
    GraphDatabase = None

BASE_LABEL = "DirectusNode"


def _identifier(name: str) -> str:
    return "`" + re.sub(r"[^0-9A-Za-z_]", "_", name) + "`"


def _rel_type(field_name: str) -> str:
    return _identifier(re.sub(r"(?<!^)(?=[A-Z])", "_", field_name).upper())


def sanitize_props(props: Dict[str, Any]) -> Dict[str, Any]:
    """
    Converts nested dicts/lists to JSON strings because Neo4j
    doesn't support complex types as properties.
    """
    sanitized = {}
    for k, v in props.items():
        if isinstance(v, (dict, list)):
            try:
                sanitized[k] = json.dumps(v, ensure_ascii=False)
            except (TypeError, ValueError):
                sanitized[k] = str(v)
        else:
            sanitized[k] = v
    return sanitized


class Neo4jGraphSink(GraphSink):
    """
    Nodes are merged as they are registered. Reference fields become
    relationships, written on close once every endpoint exists.
    """

    def __init__(self, uri: str, user: str, password: str, database: Optional[str] = None):
        if GraphDatabase is None:
            raise RuntimeError("neo4j driver is not installed; install neo4j to use GRAPH_SINK=neo4j")
        self.driver = GraphDatabase.driver(uri, auth=(user, password))
        self.database = database
        self.pending_rels: List[Dict[str, Any]] = []

    def register_node(self, node: ResolvedNode) -> None:
        props = sanitize_props(dict(node.fields))
        props["directus_id"] = node.origin_id if not isinstance(node.origin_id, (dict, list)) else str(node.origin_id)
        cypher = f"""
        MERGE (n:{BASE_LABEL} {{id: $id}})
        SET n:{_identifier(node.node_type)}
        SET n += $props
        """
        with self.driver.session(database=self.database) as session:
            session.execute_write(lambda tx: tx.run(cypher, id=node.node_id, props=props))

        for name, ref in node.references.items():
            targets = ref if isinstance(ref, list) else [ref]
            for position, target in enumerate(targets):
                self.pending_rels.append({
                    "type": _rel_type(name),
                    "from_id": node.node_id,
                    "to_id": target,
                    "props": {"field": name, "position": position},
                })

    def close(self) -> None:
        try:
            self._flush_relationships()
        finally:
            self.driver.close()

    def _flush_relationships(self) -> None:
        by_type: Dict[str, List[Dict[str, Any]]] = {}
        for r in self.pending_rels:
            by_type.setdefault(r["type"], []).append(r)

        with self.driver.session(database=self.database) as session:
            for rel_type, rows in by_type.items():
                cypher = f"""
                UNWIND $rows AS row
                MATCH (a:{BASE_LABEL} {{id: row.from_id}})
                MATCH (b:{BASE_LABEL} {{id: row.to_id}})
                MERGE (a)-[rel:{rel_type} {{position: row.props.position}}]->(b)
                SET rel += row.props
                """
                session.execute_write(lambda tx: tx.run(cypher, rows=rows))
        self.pending_rels = []
