"""
Neo4j Configuration
===================

Connection settings for the Neo4j backing engine.

Every field supports override from environment variables, so the adapter can be
deployed without code changes.

Usage:
    from vecgraph.storage.graph import Neo4jConfig

    # Default (env vars or default values)
    config = Neo4jConfig()

    # Explicit override
    config = Neo4jConfig(uri="bolt://db:7687", password="secret")

Environment Variables:
    VECTOR_DB: Selected vector backend, must be "neo4j"
    NEO4J_URI: Bolt/neo4j URI (default: bolt://localhost:7687)
    NEO4J_USER: Username (default: neo4j)
    NEO4J_PASSWORD: Password (required)
    NEO4J_DATABASE: Database name (default: neo4j)
    NEO4J_MAX_CONNECTION_POOL_SIZE: Max pooled connections (default: 50)
    NEO4J_CONNECTION_TIMEOUT: Connection timeout in seconds (default: 30)
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from vecgraph.errors import ConfigurationError

BACKEND_NAME = "neo4j"


def _get_env_str(key: str, default: str) -> str:
    """Read environment variable as string."""
    return os.environ.get(key, default)


def _get_env_int(key: str, default: int) -> int:
    """Read environment variable as integer."""
    return int(os.environ.get(key, default))


def _get_env_float(key: str, default: float) -> float:
    """Read environment variable as float."""
    return float(os.environ.get(key, default))


@dataclass
class Neo4jConfig:
    """
    Neo4j connection configuration.

    Attributes:
        uri: Bolt/neo4j URI of the server
        username: Authentication user
        password: Authentication password
        database: Target database name
        vector_db: Backend selector, must match this adapter ("neo4j")
        max_connection_pool_size: Max connections in the driver pool
        connection_timeout: Handshake timeout in seconds
    """
    uri: str = field(default_factory=lambda: _get_env_str("NEO4J_URI", "bolt://localhost:7687"))
    username: str = field(default_factory=lambda: _get_env_str("NEO4J_USER", "neo4j"))
    password: Optional[str] = field(default_factory=lambda: _get_env_str("NEO4J_PASSWORD", "") or None)
    database: str = field(default_factory=lambda: _get_env_str("NEO4J_DATABASE", "neo4j"))
    vector_db: str = field(default_factory=lambda: _get_env_str("VECTOR_DB", BACKEND_NAME))
    max_connection_pool_size: int = field(
        default_factory=lambda: _get_env_int("NEO4J_MAX_CONNECTION_POOL_SIZE", 50)
    )
    connection_timeout: float = field(
        default_factory=lambda: _get_env_float("NEO4J_CONNECTION_TIMEOUT", 30.0)
    )

    def validate(self) -> None:
        """
        Check the configuration before any network I/O.

        Raises:
            ConfigurationError: backend selector mismatch or missing credentials
        """
        if (self.vector_db or "").lower() != BACKEND_NAME:
            raise ConfigurationError(
                f"Neo4j::Invalid ENV settings - VECTOR_DB is '{self.vector_db}', expected '{BACKEND_NAME}'",
                details={"vector_db": self.vector_db},
            )
        if not self.uri:
            raise ConfigurationError("Neo4j URI is required (NEO4J_URI)")
        if not self.username:
            raise ConfigurationError("Neo4j username is required (NEO4J_USER)")
        if not self.password:
            raise ConfigurationError(
                "Neo4j password is required. "
                "Provide via NEO4J_PASSWORD environment variable or password parameter."
            )
        if self.max_connection_pool_size < 1:
            raise ConfigurationError(
                f"max_connection_pool_size must be >= 1, got {self.max_connection_pool_size}"
            )

    def __repr__(self) -> str:
        return (
            f"Neo4jConfig(uri={self.uri!r}, username={self.username!r}, "
            f"password={'***' if self.password else None}, database={self.database!r})"
        )
