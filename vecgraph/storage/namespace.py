"""
Namespace Store
===============

CRUD over :Chunk nodes scoped by namespace.

Every operation validates the namespace, acquires a session and releases it on
all exit paths. Errors are raised as VectorStoreError subclasses; the public
adapter converts them into structured results.
"""

import structlog
from typing import List, Optional, Sequence

from vecgraph.errors import DimensionMismatchError
from vecgraph.storage.graph import cypher
from vecgraph.storage.graph.connection import Neo4jConnection, fetch_all, fetch_one
from vecgraph.storage.models import (
    Chunk,
    DocumentSummary,
    deserialize_metadata,
    validate_namespace,
)

log = structlog.get_logger()


class NamespaceStore:
    """
    Namespace-scoped chunk storage.

    Example:
        store = NamespaceStore(connection)
        await store.insert_many("acme", chunks)
        count = await store.count("acme")
        deleted = await store.delete_by_document("acme", "d1")
    """

    def __init__(self, connection: Neo4jConnection):
        self.connection = connection

    async def count(self, namespace: str) -> int:
        """Number of chunks in the namespace."""
        validate_namespace(namespace)
        async with self.connection.session() as session:
            record = await fetch_one(session, cypher.COUNT_CHUNKS, {"namespace": namespace})
        return int(record["count"]) if record else 0

    async def exists(self, namespace: str) -> bool:
        """True iff the namespace holds at least one chunk."""
        return await self.count(namespace) > 0

    async def embedding_dimension(self, namespace: str) -> Optional[int]:
        """Dimension of a sampled chunk embedding, or None if there is none."""
        validate_namespace(namespace)
        async with self.connection.session() as session:
            record = await fetch_one(
                session, cypher.EMBEDDING_DIMENSION, {"namespace": namespace}
            )
        if not record or record.get("dimension") is None:
            return None
        return int(record["dimension"])

    async def insert(self, namespace: str, chunk: Chunk) -> int:
        """Insert a single chunk."""
        return await self.insert_many(namespace, [chunk])

    async def insert_many(self, namespace: str, chunks: Sequence[Chunk]) -> int:
        """
        Insert chunks in one batched write.

        Chunk ids are generated by the caller; no uniqueness is enforced here.

        Returns:
            Number of nodes created

        Raises:
            DimensionMismatchError: chunks disagree with each other or with the
                dimension already used by the namespace
        """
        validate_namespace(namespace)
        if not chunks:
            return 0

        dimensions = {chunk.dimension for chunk in chunks}
        if len(dimensions) > 1:
            raise DimensionMismatchError(
                f"chunks have mixed embedding dimensions {sorted(dimensions)}",
                details={"namespace": namespace},
            )
        dimension = dimensions.pop()

        existing = await self.embedding_dimension(namespace)
        if existing is not None and existing != dimension:
            raise DimensionMismatchError(
                f"embedding dimension {dimension} does not match namespace "
                f"{namespace} dimension {existing}",
                details={"namespace": namespace, "expected": existing, "got": dimension},
            )

        async with self.connection.session() as session:
            record = await fetch_one(
                session,
                cypher.INSERT_CHUNKS,
                {"namespace": namespace, "chunks": [c.to_params() for c in chunks]},
            )
        created = int(record["created"]) if record else 0

        log.debug(
            f"Neo4j::Inserted {created} chunks",
            namespace=namespace,
            dimension=dimension,
        )
        return created

    async def delete_by_document(self, namespace: str, doc_id: str) -> int:
        """Delete every chunk of a document; returns the number removed."""
        validate_namespace(namespace)
        async with self.connection.session() as session:
            record = await fetch_one(
                session,
                cypher.DELETE_DOCUMENT,
                {"namespace": namespace, "docId": doc_id},
            )
        deleted = int(record["deletedCount"]) if record else 0
        log.info(f"Neo4j::Deleted {deleted} chunks with docId {doc_id} from {namespace}")
        return deleted

    async def delete_namespace(self, namespace: str) -> int:
        """Delete every chunk of the namespace; returns the number removed."""
        validate_namespace(namespace)
        async with self.connection.session() as session:
            record = await fetch_one(
                session, cypher.DELETE_NAMESPACE, {"namespace": namespace}
            )
        deleted = int(record["deletedCount"]) if record else 0
        log.info(f"Neo4j::Namespace {namespace} deleted along with {deleted} vectors")
        return deleted

    async def list_namespaces(self) -> List[str]:
        """All namespaces currently holding chunks."""
        async with self.connection.session() as session:
            records = await fetch_all(session, cypher.LIST_NAMESPACES)
        return [r["namespace"] for r in records if r.get("namespace")]

    async def list_documents(self, namespace: str) -> List[DocumentSummary]:
        """Distinct documents of the namespace with their chunk count and metadata."""
        validate_namespace(namespace)
        async with self.connection.session() as session:
            records = await fetch_all(
                session, cypher.LIST_DOCUMENTS, {"namespace": namespace}
            )

        documents = []
        for record in records:
            preview = record.get("pageContent") or ""
            documents.append(DocumentSummary(
                doc_id=record["docId"],
                chunk_count=int(record["chunkCount"]),
                metadata=deserialize_metadata(record.get("metadata")),
                preview=preview[:50],
            ))
        return documents

    async def reset_all(self) -> None:
        """
        Remove every node and relationship, regardless of namespace.

        Destructive and unscoped: full-system teardown only.
        """
        async with self.connection.session() as session:
            await fetch_all(session, cypher.RESET_ALL)
        log.warning("Neo4j::Database reset - all nodes and relationships deleted")
