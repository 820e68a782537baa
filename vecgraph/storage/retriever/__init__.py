"""
Hybrid Similarity Search
========================

Direct cosine similarity blended with KNN-graph path similarity.
"""

from .hybrid import HybridSimilaritySearch
from .models import ScoredChunk, SearchResult

__all__ = [
    "HybridSimilaritySearch",
    "ScoredChunk",
    "SearchResult",
]
