"""
Neo4j Vector Store
==================

Public adapter surface consumed by the ingestion and query callers.

Coordinates:
- Neo4jConnection (single AsyncDriver, scoped sessions)
- NamespaceStore (chunk CRUD scoped by namespace)
- IndexGraphMaintainer (vector index, projection, KNN edges)
- HybridSimilaritySearch (direct + graph-propagated similarity)
- IngestionOrchestrator (split, embed, persist, cache, maintain)

Error policy:
- initialize(): configuration and connection errors propagate
- every other operation catches VectorStoreError at this boundary, logs it
  with a category prefix and returns a structured outcome ({"error": ...},
  False, or an empty SearchResult)

Usage:
    from vecgraph import Neo4jVectorStore

    store = Neo4jVectorStore(embedder=my_embedder)
    await store.initialize()

    await store.add_document_to_namespace(
        "acme", {"docId": "d1", "pageContent": text, "title": "MSA"}
    )
    result = await store.perform_similarity_search("acme", "termination clause")

    await store.disconnect()
"""

import structlog
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from vecgraph.config import VecGraphSettings, load_settings
from vecgraph.errors import ConfigurationError, VectorStoreError
from vecgraph.pipeline.chunking import TextSplitter
from vecgraph.pipeline.ingestion import DocumentInput, IngestionOrchestrator, IngestionResult
from vecgraph.storage.graph import Neo4jConfig, Neo4jConnection
from vecgraph.storage.maintenance import IndexGraphMaintainer
from vecgraph.storage.models import MaintenanceReport
from vecgraph.storage.namespace import NamespaceStore
from vecgraph.storage.retriever import HybridSimilaritySearch, SearchResult
from vecgraph.storage.vectors import BaseEmbedder, VectorCache

# Embeddings (optional, loaded lazily)
try:
    from vecgraph.storage.vectors.embeddings import EmbeddingService
    HAS_EMBEDDING_SERVICE = True
except ImportError:
    HAS_EMBEDDING_SERVICE = False

log = structlog.get_logger()


class Neo4jVectorStore:
    """
    Namespace-partitioned vector store on Neo4j with a KNN similarity graph.

    Architecture:
        Neo4jVectorStore
        ├── Neo4jConnection (driver lifecycle)
        ├── NamespaceStore (chunk CRUD)
        ├── IndexGraphMaintainer (index + projection + SIMILAR_TO edges)
        ├── HybridSimilaritySearch (query path)
        └── IngestionOrchestrator (document path)
    """

    name = "Neo4j"

    def __init__(
        self,
        config: Optional[Neo4jConfig] = None,
        settings: Optional[VecGraphSettings] = None,
        embedder: Optional[BaseEmbedder] = None,
        splitter: Optional[TextSplitter] = None,
        cache: Optional[VectorCache] = None
    ):
        """
        Components are created but not connected until initialize() is called.

        Args:
            config: Neo4j connection settings (default: from environment)
            settings: Search/maintenance/splitter settings (default: load_settings())
            embedder: Embedding provider (default: EmbeddingService if installed)
            splitter: Text splitter (default: built from settings and embedder limit)
            cache: Vector cache used by ingestion (default: none)
        """
        self.config = config or Neo4jConfig()
        self.settings = settings or load_settings()

        self.connection = Neo4jConnection(self.config)
        self.store = NamespaceStore(self.connection)
        self.maintainer = IndexGraphMaintainer(self.connection, self.settings.maintenance)
        self.searcher = HybridSimilaritySearch(self.connection, self.store, self.settings.search)

        self._embedder = embedder
        self._splitter = splitter
        self.cache = cache
        self._orchestrator: Optional[IngestionOrchestrator] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> List[MaintenanceReport]:
        """
        Connect and bring the derived structures of every namespace up to date.

        Raises:
            ConfigurationError: invalid configuration (no I/O attempted)
            GraphConnectionError: handshake failed

        Returns:
            One MaintenanceReport per existing namespace
        """
        await self.connection.connect()

        reports = []
        if self.settings.maintenance.refresh_on_initialize:
            try:
                namespaces = await self.store.list_namespaces()
            except VectorStoreError as e:
                log.error(f"Maintenance::Could not list namespaces - {e.message}")
                namespaces = []

            for namespace in namespaces:
                reports.append(await self.maintainer.refresh(namespace))

        log.info(f"Neo4j::Initialized, {len(reports)} namespaces refreshed")
        return reports

    async def disconnect(self) -> None:
        """Release the driver. Idempotent; initialize() may be called again."""
        await self.connection.close()

    @property
    def is_connected(self) -> bool:
        return self.connection.is_connected

    @property
    def embedder(self) -> BaseEmbedder:
        """Embedding provider, defaulting to the sentence-transformers service."""
        if self._embedder is None:
            if not HAS_EMBEDDING_SERVICE:
                raise ConfigurationError(
                    "No embedder configured and sentence-transformers is not installed. "
                    "Pass embedder= or install with: pip install 'vecgraph[embeddings]'"
                )
            self._embedder = EmbeddingService.get_instance()
        return self._embedder

    @property
    def orchestrator(self) -> IngestionOrchestrator:
        if self._orchestrator is None:
            embedder = self.embedder
            splitter = self._splitter or TextSplitter.from_settings(
                self.settings.splitter,
                embedder_limit=getattr(embedder, "max_chunk_length", None),
            )
            self._orchestrator = IngestionOrchestrator(
                self.store, self.maintainer, embedder, splitter, self.cache
            )
        return self._orchestrator

    async def heartbeat(self) -> Dict[str, bool]:
        return {"heartbeat": await self.connection.health_check()}

    # -------------------------------------------------------------------------
    # Namespaces
    # -------------------------------------------------------------------------

    async def has_namespace(self, namespace: str) -> bool:
        try:
            return await self.store.exists(namespace)
        except VectorStoreError as e:
            self._log_failure("Failed to check namespace", e, namespace)
            return False

    async def namespace_count(self, namespace: str) -> Union[int, Dict[str, str]]:
        try:
            return await self.store.count(namespace)
        except VectorStoreError as e:
            return self._log_failure("Failed to count namespace", e, namespace)

    async def namespace_stats(self, namespace: Optional[str] = None) -> Dict[str, Any]:
        """
        Raises:
            ValueError: namespace missing
        """
        if not namespace:
            raise ValueError("namespace required")
        try:
            return {"vectorCount": await self.store.count(namespace)}
        except VectorStoreError as e:
            return self._log_failure("Failed to get namespace stats", e, namespace)

    async def delete_namespace(self, namespace: Optional[str] = None) -> Dict[str, Any]:
        """
        Delete every chunk of a namespace and drop its projection.

        Raises:
            ValueError: namespace missing
        """
        if not namespace:
            raise ValueError("namespace required")
        try:
            deleted = await self.store.delete_namespace(namespace)
            await self.maintainer.drop_projection(namespace)
        except VectorStoreError as e:
            return self._log_failure("Failed to delete namespace", e, namespace)
        return {"message": f"Namespace {namespace} was deleted along with {deleted} vectors."}

    async def list_documents_in_namespace(self, namespace: str) -> Union[List[Dict[str, Any]], Dict[str, str]]:
        try:
            documents = await self.store.list_documents(namespace)
        except VectorStoreError as e:
            return self._log_failure("Failed to list documents in namespace", e, namespace)
        return [doc.to_dict() for doc in documents]

    async def refresh_namespace(self, namespace: str) -> Union[MaintenanceReport, Dict[str, str]]:
        """Run one maintenance pass on demand."""
        try:
            return await self.maintainer.refresh(namespace)
        except VectorStoreError as e:
            return self._log_failure("Failed to refresh namespace", e, namespace)

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    async def add_document_to_namespace(
        self,
        namespace: str,
        document_data: Union[DocumentInput, Mapping[str, Any]],
        full_file_path: Optional[str] = None,
        skip_cache: bool = False
    ) -> Union[IngestionResult, bool]:
        """
        Split, embed and store a document.

        Args:
            namespace: Target namespace
            document_data: DocumentInput, or a mapping with docId, pageContent
                and any further metadata keys
            full_file_path: Source path, used as vector cache key
            skip_cache: Ignore cached vectors for this file

        Returns:
            IngestionResult, or False when the document has no content
        """
        document = self._to_document(document_data)
        if not document.page_content:
            return False

        try:
            orchestrator = self.orchestrator
        except ConfigurationError as e:
            self._log_failure("Failed to add document", e, namespace)
            return IngestionResult(vectorized=False, error=e.message)

        cache_key = None if skip_cache else full_file_path
        return await orchestrator.add_document(namespace, document, cache_key=cache_key)

    async def delete_document_from_namespace(self, namespace: str, doc_id: str) -> bool:
        """Delete a document's chunks; maintenance runs only if something was removed."""
        try:
            deleted = await self.store.delete_by_document(namespace, doc_id)
        except VectorStoreError as e:
            self._log_failure("Failed to delete document chunks", e, namespace)
            return False

        if deleted > 0:
            report = await self.maintainer.refresh(namespace)
            if report.skipped:
                # last chunk gone: the namespace no longer exists
                try:
                    await self.maintainer.drop_projection(namespace)
                except VectorStoreError as e:
                    self._log_failure("Failed to drop projection", e, namespace)
        return deleted > 0

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    async def perform_similarity_search(
        self,
        namespace: str,
        input: str,
        embedder: Optional[BaseEmbedder] = None,
        similarity_threshold: Optional[float] = None,
        top_n: Optional[int] = None,
        filter_identifiers: Optional[Iterable[str]] = (),
        knn_depth: Optional[int] = None
    ) -> SearchResult:
        """
        Hybrid similarity search. Never raises.

        Args:
            namespace: Namespace to search
            input: Query text
            embedder: Query embedder (default: the adapter's embedder)
            similarity_threshold: Minimum score (default from settings)
            top_n: Max results (default from settings)
            filter_identifiers: docIds to exclude
            knn_depth: SIMILAR_TO hops, 0 for plain cosine
        """
        try:
            embedder = embedder or self.embedder
        except ConfigurationError as e:
            self._log_failure("Similarity search failed", e, namespace)
            return SearchResult.empty(
                f"Similarity search failed for namespace {namespace}", error=e.message
            )

        return await self.searcher.search(
            namespace,
            input,
            embedder,
            threshold=similarity_threshold,
            top_n=top_n,
            exclude_doc_ids=filter_identifiers,
            knn_depth=knn_depth,
        )

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    async def reset(self) -> Dict[str, Any]:
        """Delete every node, relationship and chunk projection."""
        try:
            await self.store.reset_all()
            await self.maintainer.drop_all_projections()
        except VectorStoreError as e:
            return self._log_failure("Failed to reset database", e)
        return {"reset": True}

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _to_document(self, data: Union[DocumentInput, Mapping[str, Any]]) -> DocumentInput:
        if isinstance(data, DocumentInput):
            return data
        metadata = {k: v for k, v in data.items() if k not in ("docId", "pageContent")}
        return DocumentInput(
            doc_id=str(data.get("docId") or ""),
            page_content=data.get("pageContent") or "",
            metadata=metadata,
        )

    def _log_failure(
        self,
        action: str,
        error: VectorStoreError,
        namespace: Optional[str] = None
    ) -> Dict[str, str]:
        log.error(
            f"Neo4j::{action} - {error.message}",
            namespace=namespace,
            code=error.code,
            exc_info=True,
        )
        return {"error": error.message}
