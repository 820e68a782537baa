"""
Storage Models
==============

Dataclasses exchanged between the namespace store, the maintainer and the
public adapter.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from vecgraph.errors import InvalidNamespaceError, QueryError

NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")
MAX_NAMESPACE_LENGTH = 64


def validate_namespace(namespace: Any) -> str:
    """
    Validate a namespace identifier.

    Allowed: letters, digits, underscore and dash, starting with a letter or
    digit, at most 64 characters.

    Returns:
        The namespace unchanged

    Raises:
        InvalidNamespaceError: if the identifier is rejected
    """
    if not isinstance(namespace, str) or not namespace:
        raise InvalidNamespaceError("namespace required")
    if len(namespace) > MAX_NAMESPACE_LENGTH:
        raise InvalidNamespaceError(
            f"namespace too long ({len(namespace)} > {MAX_NAMESPACE_LENGTH})",
            details={"length": len(namespace)},
        )
    if not NAMESPACE_PATTERN.match(namespace):
        raise InvalidNamespaceError(
            f"invalid namespace {namespace!r}: allowed characters are [A-Za-z0-9_-]"
        )
    return namespace


def serialize_metadata(metadata: Optional[Dict[str, Any]]) -> str:
    """Encode metadata as the opaque JSON blob stored on the node."""
    return json.dumps(metadata or {}, ensure_ascii=False, default=str)


def deserialize_metadata(blob: Optional[str]) -> Dict[str, Any]:
    """
    Decode the stored metadata blob; empty or missing blobs give {}.

    Raises:
        QueryError: the stored blob is not a JSON object
    """
    if not blob:
        return {}
    if isinstance(blob, dict):
        return blob
    try:
        metadata = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise QueryError(f"Stored metadata is not valid JSON: {e}") from e
    if not isinstance(metadata, dict):
        raise QueryError(f"Stored metadata is not a JSON object: {type(metadata).__name__}")
    return metadata


@dataclass
class Chunk:
    """
    A unit of stored, embedded text.

    Attributes:
        doc_id: Parent document id (shared by all chunks of a document)
        page_content: Chunk text
        embedding: Embedding vector, uniform length inside a namespace
        metadata: Document and chunk level attributes
        chunk_id: Unique id generated at ingestion time
    """
    doc_id: str
    page_content: str
    embedding: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)
    chunk_id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    def to_params(self) -> Dict[str, Any]:
        """Convert to the parameter map used by the insert statement."""
        return {
            "docId": self.doc_id,
            "chunkId": self.chunk_id,
            "pageContent": self.page_content,
            "metadata": serialize_metadata(self.metadata),
            "embedding": [float(v) for v in self.embedding],
        }


@dataclass
class DocumentSummary:
    """One document stored in a namespace."""
    doc_id: str
    chunk_count: int
    metadata: Dict[str, Any] = field(default_factory=dict)
    preview: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "docId": self.doc_id,
            "chunkCount": self.chunk_count,
            "metadata": self.metadata,
            "preview": self.preview,
        }


class IndexStatus(Enum):
    """Outcome of the vector index step."""
    CREATED = "created"
    ALREADY_PRESENT = "already_present"
    CONFLICT = "conflict"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class MaintenanceReport:
    """
    Result of one maintenance pass over a namespace.

    Attributes:
        namespace: Namespace maintained
        dimension: Discovered embedding dimension (None if no embeddings)
        index_status: Outcome of the vector index step
        projection: Name of the projection created (None if not created)
        projected_nodes: Nodes in the projection
        edges_deleted: SIMILAR_TO edges removed before recomputing
        edges_written: SIMILAR_TO edges written by KNN
        errors: Messages of the failed steps
    """
    namespace: str
    dimension: Optional[int] = None
    index_status: IndexStatus = IndexStatus.SKIPPED
    projection: Optional[str] = None
    projected_nodes: int = 0
    edges_deleted: int = 0
    edges_written: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        """True when no chunk had an embedding, so nothing was rebuilt."""
        return self.dimension is None

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> Dict[str, Any]:
        """Return summary for logging."""
        return {
            "namespace": self.namespace,
            "dimension": self.dimension,
            "index": self.index_status.value,
            "projection": self.projection,
            "nodes": self.projected_nodes,
            "edges_deleted": self.edges_deleted,
            "edges_written": self.edges_written,
            "errors": len(self.errors),
        }
