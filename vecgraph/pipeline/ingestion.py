"""
Ingestion Orchestrator
======================

Turns a document into stored, embedded chunks of a namespace.

Pipeline:
1. Empty content          -> not vectorized, no error
2. Vector cache hit       -> replay cached chunks with fresh chunk ids
3. Split + embed          -> one embedding batch, checked against chunk count
4. Persist                -> single batched write through NamespaceStore
5. Cache write-back       -> when a cache key is given
6. Maintenance            -> one IndexGraphMaintainer pass for the namespace

Nothing is written when splitting or embedding fails.

Usage:
    orchestrator = IngestionOrchestrator(store, maintainer, embedder, splitter)
    result = await orchestrator.add_document(
        "acme",
        DocumentInput(doc_id="d1", page_content=text, metadata={"title": "MSA"}),
    )
    if result.vectorized:
        ...
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from vecgraph.errors import EmbeddingError, VectorStoreError
from vecgraph.pipeline.chunking import TextSplitter, build_header_metadata
from vecgraph.storage.maintenance import IndexGraphMaintainer
from vecgraph.storage.models import Chunk, MaintenanceReport, validate_namespace
from vecgraph.storage.namespace import NamespaceStore
from vecgraph.storage.vectors.base import BaseEmbedder, coerce_vector
from vecgraph.storage.vectors.cache import CachedVector, VectorCache

logger = logging.getLogger(__name__)


@dataclass
class DocumentInput:
    """
    A document to ingest.

    Attributes:
        doc_id: Document identifier shared by all its chunks
        page_content: Full text
        metadata: Document attributes (title, published, url, ...)
    """
    doc_id: str
    page_content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IngestionResult:
    """Outcome of add_document."""
    vectorized: bool
    error: Optional[str] = None
    chunk_count: int = 0
    from_cache: bool = False
    maintenance: Optional[MaintenanceReport] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"vectorized": self.vectorized, "error": self.error}


class IngestionOrchestrator:
    """
    Coordinates splitter, embedder, store, cache and maintainer for one document.

    Attributes:
        store: NamespaceStore receiving the chunks
        maintainer: IndexGraphMaintainer run after each successful write
        embedder: Embedding provider
        splitter: Text splitter
        cache: Optional VectorCache
    """

    def __init__(
        self,
        store: NamespaceStore,
        maintainer: IndexGraphMaintainer,
        embedder: BaseEmbedder,
        splitter: Optional[TextSplitter] = None,
        cache: Optional[VectorCache] = None
    ):
        self.store = store
        self.maintainer = maintainer
        self.embedder = embedder
        self.splitter = splitter or TextSplitter(
            embedder_limit=getattr(embedder, "max_chunk_length", None)
        )
        self.cache = cache

    async def add_document(
        self,
        namespace: str,
        document: DocumentInput,
        cache_key: Optional[str] = None
    ) -> IngestionResult:
        """
        Ingest a document into a namespace.

        Args:
            namespace: Target namespace
            document: Document to ingest
            cache_key: Vector cache key (usually the source file path)

        Returns:
            IngestionResult, vectorized=True only if every write completed
        """
        try:
            validate_namespace(namespace)
            if not document.page_content:
                logger.info(f"Ingestion::Document {document.doc_id} has no content, skipped")
                return IngestionResult(vectorized=False)

            chunks = self._replay_cache(document, cache_key)
            from_cache = chunks is not None
            if chunks is None:
                chunks = await self._split_and_embed(document)

            if not chunks:
                raise EmbeddingError(
                    f"Could not embed document {document.doc_id}: no chunks produced"
                )

            await self.store.insert_many(namespace, chunks)

            if cache_key and self.cache is not None and not from_cache:
                self._write_cache(cache_key, chunks)

            report = await self.maintainer.refresh(namespace)

        except VectorStoreError as e:
            logger.error(f"Ingestion::Failed to add document {document.doc_id}: {e.message}")
            return IngestionResult(vectorized=False, error=e.message)
        except ValueError as e:
            logger.error(f"Ingestion::Failed to add document {document.doc_id}: {e}")
            return IngestionResult(vectorized=False, error=str(e))

        logger.info(
            f"Ingestion::Added {len(chunks)} chunks of {document.doc_id} to {namespace}"
            f"{' (from cache)' if from_cache else ''}"
        )
        return IngestionResult(
            vectorized=True,
            chunk_count=len(chunks),
            from_cache=from_cache,
            maintenance=report,
        )

    def _replay_cache(
        self,
        document: DocumentInput,
        cache_key: Optional[str]
    ) -> Optional[List[Chunk]]:
        """Cached chunks re-keyed to this document, or None on a miss."""
        if not cache_key or self.cache is None or not self.cache.exists(cache_key):
            return None

        cached = self.cache.load(cache_key)
        if not cached:
            return None

        logger.info(f"Ingestion::Cache hit for {cache_key} ({len(cached)} vectors)")
        return [
            Chunk(
                doc_id=document.doc_id,
                page_content=entry.text,
                embedding=coerce_vector(entry.values),
                metadata=dict(entry.metadata),
                chunk_id=str(uuid4()),
            )
            for entry in cached
        ]

    def _write_cache(self, cache_key: str, chunks: List[Chunk]) -> bool:
        """Store computed vectors; a failed write only loses the cache entry."""
        try:
            self.cache.store(cache_key, [
                CachedVector(
                    id=chunk.chunk_id,
                    text=chunk.page_content,
                    values=chunk.embedding,
                    metadata=chunk.metadata,
                )
                for chunk in chunks
            ])
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Ingestion::Could not cache vectors for {cache_key}: {e}")
            return False
        return True

    async def _split_and_embed(self, document: DocumentInput) -> List[Chunk]:
        texts = self.splitter.split(
            document.page_content,
            header_metadata=build_header_metadata(document.metadata),
        )
        if not texts:
            return []

        try:
            vectors = await self.embedder.embed_batch(texts)
        except VectorStoreError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding failed for {document.doc_id}: {e}") from e

        if not vectors or len(vectors) != len(texts):
            raise EmbeddingError(
                f"Could not embed document {document.doc_id}: "
                f"got {len(vectors or [])} vectors for {len(texts)} chunks"
            )

        return [
            Chunk(
                doc_id=document.doc_id,
                page_content=text,
                embedding=coerce_vector(vector),
                metadata={**document.metadata, "text": text},
            )
            for text, vector in zip(texts, vectors)
        ]
