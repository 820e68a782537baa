"""
Storage Layer
=============

Namespace-partitioned chunk storage on Neo4j with a KNN similarity graph.

Components:
- graph/: Neo4j configuration, connection and Cypher statements
- namespace: NamespaceStore (CRUD scoped by namespace)
- maintenance: IndexGraphMaintainer (vector index, projection, KNN edges)
- retriever/: HybridSimilaritySearch
- vectors/: embedder interface and vector cache

Architecture:
    addDocument -> NamespaceStore.insert_many -> IndexGraphMaintainer.refresh
                                                    |
                         vector index  +  chunkGraph_<ns>  +  SIMILAR_TO edges
                                                    |
    search -> cosine(query, chunk) ---------------+---> graph paths
                        |                                  |
                  direct_similarity             avg(product of edge weights)
                        |                                  |
                        +----------------+-----------------+
                                         |
              combined = alpha * direct + (1 - alpha) * avg_path
"""

from vecgraph.storage.graph import Neo4jConfig, Neo4jConnection
from vecgraph.storage.maintenance import IndexGraphMaintainer
from vecgraph.storage.models import (
    Chunk,
    DocumentSummary,
    IndexStatus,
    MaintenanceReport,
    validate_namespace,
)
from vecgraph.storage.namespace import NamespaceStore
from vecgraph.storage.retriever import HybridSimilaritySearch, SearchResult
from vecgraph.storage.vectors import BaseEmbedder, VectorCache

__all__ = [
    # Graph
    "Neo4jConfig",
    "Neo4jConnection",
    # Namespace store
    "NamespaceStore",
    "Chunk",
    "DocumentSummary",
    "validate_namespace",
    # Maintenance
    "IndexGraphMaintainer",
    "IndexStatus",
    "MaintenanceReport",
    # Search
    "HybridSimilaritySearch",
    "SearchResult",
    # Vectors
    "BaseEmbedder",
    "VectorCache",
]
