"""
Embedding Service (sentence-transformers)

Default embedding provider for ingestion and search.

Key Features:
- Singleton pattern (model loaded once and reused)
- Lazy loading (model loaded on first use, not on import)
- Optional query/passage prefixes (E5-style models)
- Batch encoding for efficiency
- Configurable device (CPU/CUDA)
- Thread-safe initialization
- Async API running the synchronous model in the default executor

Configuration (environment variables):
- EMBEDDING_MODEL: model name (default: sentence-transformers/all-MiniLM-L6-v2)
- EMBEDDING_DEVICE: cpu / cuda (default: auto-detect)
- EMBEDDING_BATCH_SIZE: encode batch size (default: 32)
- EMBEDDING_NORMALIZE: normalize vectors (default: true)
- EMBEDDING_QUERY_PREFIX / EMBEDDING_PASSAGE_PREFIX: text prefixes (default: none)
- EMBEDDING_MAX_CHUNK_LENGTH: max characters per chunk (default: 1000)
"""

import asyncio
import logging
import os
from threading import Lock
from typing import List, Optional, Sequence

try:
    from sentence_transformers import SentenceTransformer
    import torch
except ImportError:
    raise ImportError(
        "sentence-transformers and torch are required for EmbeddingService. "
        "Install with: pip install 'vecgraph[embeddings]'"
    )

from vecgraph.errors import EmbeddingError
from vecgraph.storage.vectors.base import BaseEmbedder

logger = logging.getLogger(__name__)


class EmbeddingService(BaseEmbedder):
    """
    Singleton service for sentence-transformers embeddings.

    Usage:
        # Get singleton instance
        service = EmbeddingService.get_instance()

        # Encode a query
        query_vector = await service.embed("What is a contract?")

        # Batch encoding of document chunks
        vectors = await service.embed_batch(["text1", "text2"])
    """

    _instance: Optional['EmbeddingService'] = None
    _lock: Lock = Lock()

    def __init__(
        self,
        model_name: Optional[str] = None,
        device: Optional[str] = None,
        batch_size: int = 32,
        normalize_embeddings: bool = True,
        query_prefix: Optional[str] = None,
        passage_prefix: Optional[str] = None,
        max_chunk_length: Optional[int] = None
    ):
        """
        Initialize EmbeddingService.

        Args:
            model_name: Sentence-transformers model name
            device: Device to use ('cpu', 'cuda', or None for auto-detect)
            batch_size: Batch size for encoding
            normalize_embeddings: Whether to normalize embeddings (for cosine similarity)
            query_prefix: Prefix prepended to queries (e.g. "query: " for E5)
            passage_prefix: Prefix prepended to chunks (e.g. "passage: " for E5)
            max_chunk_length: Max characters per chunk accepted by the model
        """
        self.model_name = (
            model_name or
            os.getenv("EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2")
        )
        self.device = (
            device or
            os.getenv("EMBEDDING_DEVICE", "cuda" if torch.cuda.is_available() else "cpu")
        )
        self.batch_size = int(os.getenv("EMBEDDING_BATCH_SIZE", str(batch_size)))
        self.normalize_embeddings = (
            os.getenv("EMBEDDING_NORMALIZE", str(normalize_embeddings)).lower() == "true"
        )
        self.query_prefix = (
            query_prefix if query_prefix is not None
            else os.getenv("EMBEDDING_QUERY_PREFIX", "")
        )
        self.passage_prefix = (
            passage_prefix if passage_prefix is not None
            else os.getenv("EMBEDDING_PASSAGE_PREFIX", "")
        )
        self.max_chunk_length = int(
            max_chunk_length or os.getenv("EMBEDDING_MAX_CHUNK_LENGTH", "1000")
        )

        # Model will be loaded lazily on first use
        self._model: Optional[SentenceTransformer] = None

        logger.info(
            "EmbeddingService configured",
            extra={
                "model": self.model_name,
                "device": self.device,
                "batch_size": self.batch_size,
                "normalize": self.normalize_embeddings
            }
        )

    @classmethod
    def get_instance(cls, **kwargs) -> 'EmbeddingService':
        """
        Get singleton instance of EmbeddingService.

        Thread-safe singleton implementation using double-checked locking.

        Args:
            **kwargs: Arguments passed to __init__ on first instantiation
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls(**kwargs)
        return cls._instance

    def _load_model(self) -> SentenceTransformer:
        """Lazy load the sentence-transformers model (downloads it if not cached)."""
        if self._model is None:
            with self._lock:
                if self._model is None:
                    logger.info(f"Loading embedding model: {self.model_name} on device: {self.device}")
                    try:
                        self._model = SentenceTransformer(
                            self.model_name,
                            device=self.device
                        )
                        logger.info(
                            f"Model loaded successfully. Embedding dimension: "
                            f"{self._model.get_sentence_embedding_dimension()}"
                        )
                    except Exception as e:
                        logger.error(f"Failed to load model: {e}", exc_info=True)
                        raise EmbeddingError(f"Failed to load embedding model: {e}")

        return self._model

    @property
    def is_loaded(self) -> bool:
        """Check if model is loaded."""
        return self._model is not None

    def encode_query(self, text: str) -> List[float]:
        """Encode a query text with the configured query prefix."""
        model = self._load_model()

        logger.debug(f"Encoding query: {text[:100]}...")

        embedding = model.encode(
            f"{self.query_prefix}{text}",
            normalize_embeddings=self.normalize_embeddings,
            convert_to_numpy=True
        )
        return embedding.tolist()

    def encode_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Encode a batch of document chunks with the passage prefix.

        More efficient than encoding one by one.
        """
        if not texts:
            return []

        model = self._load_model()
        prefixed_texts = [f"{self.passage_prefix}{text}" for text in texts]

        logger.info(f"Batch encoding {len(texts)} chunks")

        embeddings = model.encode(
            prefixed_texts,
            batch_size=self.batch_size,
            normalize_embeddings=self.normalize_embeddings,
            show_progress_bar=False,
            convert_to_numpy=True
        )
        return embeddings.tolist()

    async def embed(self, text: str) -> List[float]:
        """Async query encoding, run in thread pool to avoid blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.encode_query, text)

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """Async batch encoding, run in thread pool to avoid blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.encode_batch, list(texts))

    def __repr__(self) -> str:
        return (
            f"EmbeddingService("
            f"model={self.model_name}, "
            f"device={self.device}, "
            f"loaded={self.is_loaded})"
        )
