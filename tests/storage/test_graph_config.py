"""
Test Neo4j Configuration
========================

Unit tests for Neo4jConfig dataclass.
"""

import pytest
import os
from unittest.mock import patch

from vecgraph.errors import ConfigurationError


class TestNeo4jConfig:
    """Test Neo4jConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        from vecgraph.storage.graph import Neo4jConfig

        with patch.dict(os.environ, {}, clear=True):
            config = Neo4jConfig()

        assert config.uri == "bolt://localhost:7687"
        assert config.username == "neo4j"
        assert config.password is None
        assert config.database == "neo4j"
        assert config.vector_db == "neo4j"
        assert config.max_connection_pool_size == 50
        assert config.connection_timeout == 30.0

    def test_custom_values(self):
        """Test custom configuration values."""
        from vecgraph.storage.graph import Neo4jConfig

        config = Neo4jConfig(
            uri="neo4j://db.example.com:7687",
            username="admin",
            password="secret",
            database="chunks",
            max_connection_pool_size=10,
            connection_timeout=5.0,
        )

        assert config.uri == "neo4j://db.example.com:7687"
        assert config.username == "admin"
        assert config.password == "secret"
        assert config.database == "chunks"
        assert config.max_connection_pool_size == 10
        assert config.connection_timeout == 5.0

    def test_environment_variables(self):
        """Test that config reads NEO4J_* env vars at construction time."""
        from vecgraph.storage.graph.config import Neo4jConfig

        env = {
            "NEO4J_URI": "bolt://env-host:7687",
            "NEO4J_USER": "env-user",
            "NEO4J_PASSWORD": "env-pass",
            "NEO4J_DATABASE": "envdb",
            "NEO4J_MAX_CONNECTION_POOL_SIZE": "7",
            "NEO4J_CONNECTION_TIMEOUT": "2.5",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Neo4jConfig()

        assert config.uri == "bolt://env-host:7687"
        assert config.username == "env-user"
        assert config.password == "env-pass"
        assert config.database == "envdb"
        assert config.max_connection_pool_size == 7
        assert config.connection_timeout == 2.5

    def test_import_from_storage_graph(self):
        """Test that Neo4jConfig is exported from vecgraph.storage.graph."""
        from vecgraph.storage.graph import Neo4jConfig
        from vecgraph.storage.graph.config import Neo4jConfig as DirectImport

        assert Neo4jConfig is DirectImport


class TestNeo4jConfigValidation:
    """Test validate() before any network I/O."""

    def test_valid_config(self, neo4j_config):
        neo4j_config.validate()

    def test_backend_mismatch(self):
        """VECTOR_DB selecting another backend is a configuration error."""
        from vecgraph.storage.graph import Neo4jConfig

        config = Neo4jConfig(password="secret", vector_db="pinecone")

        with pytest.raises(ConfigurationError, match="Invalid ENV settings"):
            config.validate()

    def test_backend_selector_from_env(self):
        from vecgraph.storage.graph import Neo4jConfig

        with patch.dict(os.environ, {"VECTOR_DB": "lancedb", "NEO4J_PASSWORD": "x"}, clear=True):
            config = Neo4jConfig()

        with pytest.raises(ConfigurationError):
            config.validate()

    def test_missing_password(self):
        from vecgraph.storage.graph import Neo4jConfig

        config = Neo4jConfig(password=None, vector_db="neo4j")

        with pytest.raises(ConfigurationError, match="password is required"):
            config.validate()

    def test_missing_uri(self):
        from vecgraph.storage.graph import Neo4jConfig

        config = Neo4jConfig(uri="", password="secret", vector_db="neo4j")

        with pytest.raises(ConfigurationError, match="URI is required"):
            config.validate()

    def test_invalid_pool_size(self):
        from vecgraph.storage.graph import Neo4jConfig

        config = Neo4jConfig(password="secret", vector_db="neo4j", max_connection_pool_size=0)

        with pytest.raises(ConfigurationError, match="max_connection_pool_size"):
            config.validate()

    def test_repr_masks_password(self, neo4j_config):
        text = repr(neo4j_config)

        assert "test-password" not in text
        assert "***" in text
