"""
vecgraph Vector Helpers
=======================

Components:
- BaseEmbedder: interface of the embedding provider
- VectorCache: content-addressed cache of computed chunks and vectors
- EmbeddingService: sentence-transformers provider (optional extra,
  import from vecgraph.storage.vectors.embeddings)

Example:
    from vecgraph.storage.vectors import VectorCache

    cache = VectorCache("storage/vector-cache")
"""

from vecgraph.storage.vectors.base import BaseEmbedder, coerce_vector
from vecgraph.storage.vectors.cache import CachedVector, VectorCache

__all__ = [
    "BaseEmbedder",
    "coerce_vector",
    "CachedVector",
    "VectorCache",
]
