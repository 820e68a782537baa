"""
Base Embedder Interface
=======================

Interface of the embedding provider consumed by ingestion and search.

Dimensionality is provider-defined and discovered from stored data, never
configured here.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

import numpy as np

from vecgraph.errors import EmbeddingError


def coerce_vector(values: Any) -> List[float]:
    """
    Convert an embedding (list, tuple, numpy array) to a flat list of floats.

    Raises:
        EmbeddingError: empty, non-numeric, non-finite or multi-dimensional input
    """
    if values is None:
        raise EmbeddingError("embedder returned no vector")
    try:
        array = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise EmbeddingError(f"embedding is not numeric: {e}")
    if array.ndim != 1 or array.size == 0:
        raise EmbeddingError(f"embedding must be a non-empty 1-d vector, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise EmbeddingError("embedding contains NaN or infinite values")
    return array.tolist()


class BaseEmbedder(ABC):
    """
    Embedding provider.

    Example:
        >>> class MyEmbedder(BaseEmbedder):
        ...     async def embed(self, text):
        ...         return await my_api.embed(text)
        ...     async def embed_batch(self, texts):
        ...         return await my_api.embed_many(texts)
    """

    # Max characters accepted per chunk (None = no limit)
    max_chunk_length: Optional[int] = None

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Embed a query text."""

    @abstractmethod
    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed document chunks in one batch, preserving order."""
