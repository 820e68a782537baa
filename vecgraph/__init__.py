"""
vecgraph: Namespace-partitioned vector store on Neo4j
=====================================================

Stores embedded text chunks in Neo4j, keeps a vector index and a KNN
similarity graph over them, and answers queries by blending direct cosine
similarity with similarity propagated along the graph.

Quick Start:
    from vecgraph import Neo4jVectorStore

    store = Neo4jVectorStore(embedder=my_embedder)
    await store.initialize()

    # Ingestion
    await store.add_document_to_namespace("acme", {"docId": "d1", "pageContent": text})

    # Search
    result = await store.perform_similarity_search("acme", "termination clause")
    print(result.context_texts)

Components:
- core: Neo4jVectorStore
- storage: Neo4jConnection, NamespaceStore, IndexGraphMaintainer, HybridSimilaritySearch
- pipeline: TextSplitter, IngestionOrchestrator
- config: VecGraphSettings, load_settings
- errors: VectorStoreError and subclasses
"""

__version__ = "0.1.0"

# Core API
from vecgraph.core import Neo4jVectorStore

# Convenience exports
from vecgraph.config import VecGraphSettings, load_settings
from vecgraph.errors import VectorStoreError
from vecgraph.pipeline import DocumentInput, IngestionResult
from vecgraph.storage import Neo4jConfig, SearchResult

__all__ = [
    # Core
    "Neo4jVectorStore",
    # Config
    "Neo4jConfig",
    "VecGraphSettings",
    "load_settings",
    # Models
    "DocumentInput",
    "IngestionResult",
    "SearchResult",
    # Errors
    "VectorStoreError",
]
