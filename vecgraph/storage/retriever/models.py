"""
Hybrid Search Models
====================

Dataclasses for search candidates and results.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional


@dataclass
class ScoredChunk:
    """
    A chunk that survived the direct-similarity filter.

    Attributes:
        chunk_id: Chunk identifier
        doc_id: Parent document identifier
        text: Chunk text content
        metadata: Deserialized source metadata
        direct_similarity: Cosine similarity to the query [0-1]
        path_similarities: Product of edge weights for each neighbour path
        combined_score: alpha * direct + (1-alpha) * mean(path_similarities)
    """
    chunk_id: str
    doc_id: str
    text: str
    metadata: Dict[str, Any]
    direct_similarity: float
    path_similarities: List[float] = field(default_factory=list)
    combined_score: float = 0.0

    @property
    def average_path_similarity(self) -> float:
        """Mean path similarity, 0 when no neighbour survived the edge filter."""
        if not self.path_similarities:
            return 0.0
        return sum(self.path_similarities) / len(self.path_similarities)

    def __repr__(self) -> str:
        return (
            f"<ScoredChunk(chunk_id={self.chunk_id[:8]}..., "
            f"combined={self.combined_score:.3f}, direct={self.direct_similarity:.3f}, "
            f"paths={len(self.path_similarities)})>"
        )


@dataclass
class SearchResult:
    """
    Result of a similarity search. Always well-formed, possibly empty.

    Attributes:
        context_texts: Chunk texts, best first
        sources: Deserialized metadata of each chunk
        scores: Combined score of each chunk
        message: Why the result is empty (None otherwise)
        error: Error message when the search failed
    """
    context_texts: List[str] = field(default_factory=list)
    sources: List[Dict[str, Any]] = field(default_factory=list)
    scores: List[float] = field(default_factory=list)
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def empty(cls, message: str, error: Optional[str] = None) -> "SearchResult":
        return cls(message=message, error=error)

    @classmethod
    def from_chunks(cls, chunks: List[ScoredChunk]) -> "SearchResult":
        return cls(
            context_texts=[c.text for c in chunks],
            sources=[c.metadata for c in chunks],
            scores=[c.combined_score for c in chunks],
        )

    def __len__(self) -> int:
        return len(self.context_texts)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "contextTexts": self.context_texts,
            "sources": self.sources,
            "scores": self.scores,
            "message": self.message,
        }
        if self.error is not None:
            data["error"] = self.error
        return data
