"""
vecgraph Core
=============

Public adapter surface.
"""

from vecgraph.core.adapter import Neo4jVectorStore

__all__ = ["Neo4jVectorStore"]
