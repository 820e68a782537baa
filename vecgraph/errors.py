"""
vecgraph Errors
===============

Error taxonomy shared by every layer of the adapter.

- ConfigurationError: fatal, raised before any network I/O
- GraphConnectionError: handshake/connectivity failure, retried on next session
- MaintenanceError: index/projection/KNN step failed, structures left stale
- QueryError: backing engine query failed
- EmbeddingError: embedder or splitter failed for a single document/query
- InvalidNamespaceError: namespace identifier rejected by validation
- DimensionMismatchError: embedding length differs from the namespace dimension
"""

from typing import Any, Dict, Mapping, Optional


class VectorStoreError(Exception):
    """
    Base exception for all vecgraph errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
        details: Additional context (never contains credentials)
    """

    code = "vector_store_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = dict(details or {})

    def asdict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured results and logging."""
        return {
            "error": self.message,
            "code": self.code,
            "details": {k: self.details[k] for k in sorted(self.details)},
        }


class ConfigurationError(VectorStoreError):
    """Invalid or incomplete adapter configuration."""
    code = "configuration_error"


class GraphConnectionError(VectorStoreError, ConnectionError):
    """Connection to the backing graph engine could not be established."""
    code = "connection_error"


class MaintenanceError(VectorStoreError):
    """A step of the index/graph maintenance pipeline failed."""
    code = "maintenance_error"


class QueryError(VectorStoreError):
    """A query against the backing engine failed."""
    code = "query_error"


class EmbeddingError(VectorStoreError):
    """Embedding or splitting failed for a document or query."""
    code = "embedding_error"


class InvalidNamespaceError(VectorStoreError, ValueError):
    """Namespace identifier is empty, too long or contains forbidden characters."""
    code = "invalid_namespace"


class DimensionMismatchError(VectorStoreError):
    """Embedding dimension does not match the dimension used by the namespace."""
    code = "dimension_mismatch"
