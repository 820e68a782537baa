"""
vecgraph Graph Storage
======================

Neo4j access layer.

Components:
- Neo4jConfig: connection settings (env-var driven)
- Neo4jConnection: lazily initialized AsyncDriver with scoped sessions
- cypher: every Cypher statement sent by the adapter

Example:
    from vecgraph.storage.graph import Neo4jConnection, Neo4jConfig

    connection = Neo4jConnection(Neo4jConfig(uri="bolt://localhost:7687", password="secret"))
    async with connection.session() as session:
        ...
"""

from vecgraph.storage.graph.config import Neo4jConfig
from vecgraph.storage.graph.connection import Neo4jConnection, fetch_all, fetch_one

__all__ = [
    "Neo4jConfig",
    "Neo4jConnection",
    "fetch_all",
    "fetch_one",
]
