"""
vecgraph Test Configuration
===========================

Shared fixtures for all tests.
"""

import pytest
import pytest_asyncio
from unittest.mock import patch

from fakes import FakeGraphEngine, KeywordEmbedder, ParagraphSplitter

KEYWORDS = ["contract", "termination", "payment", "privacy", "liability"]


# Configuration fixtures
@pytest.fixture
def neo4j_config():
    """Valid Neo4j configuration pointing at a local server."""
    from vecgraph.storage.graph import Neo4jConfig

    return Neo4jConfig(
        uri="bolt://localhost:7687",
        username="neo4j",
        password="test-password",
        database="neo4j",
        vector_db="neo4j",
    )


@pytest.fixture
def settings():
    """Packaged default settings."""
    from vecgraph.config import VecGraphSettings

    return VecGraphSettings()


# In-memory Neo4j
@pytest.fixture
def fake_engine():
    """FakeGraphEngine installed in place of AsyncGraphDatabase."""
    engine = FakeGraphEngine()
    with patch("vecgraph.storage.graph.connection.AsyncGraphDatabase") as graph_database:
        graph_database.driver.side_effect = engine.driver
        yield engine


@pytest_asyncio.fixture
async def connection(fake_engine, neo4j_config):
    """Connected Neo4jConnection backed by the fake engine."""
    from vecgraph.storage.graph import Neo4jConnection

    conn = Neo4jConnection(neo4j_config)
    await conn.connect()
    yield conn
    await conn.close()


@pytest.fixture
def store(connection):
    from vecgraph.storage.namespace import NamespaceStore

    return NamespaceStore(connection)


@pytest.fixture
def maintainer(connection, settings):
    from vecgraph.storage.maintenance import IndexGraphMaintainer

    return IndexGraphMaintainer(connection, settings.maintenance)


# Collaborators
@pytest.fixture
def embedder():
    """Deterministic keyword embedder (dimension 6)."""
    return KeywordEmbedder(KEYWORDS)


@pytest.fixture
def splitter():
    """Blank-line splitter."""
    return ParagraphSplitter()


@pytest.fixture
def make_chunk(embedder):
    """Build a Chunk whose embedding comes from the keyword embedder."""
    from vecgraph.storage.models import Chunk

    def _make(doc_id: str, text: str, **metadata):
        return Chunk(
            doc_id=doc_id,
            page_content=text,
            embedding=embedder.vector(text),
            metadata={**metadata, "text": text},
        )

    return _make


# Sample data fixtures
@pytest.fixture
def sample_contract_text():
    """Three-paragraph contract used by the acme scenario."""
    return (
        "This contract is entered into by Acme and the Supplier. The contract covers services.\n\n"
        "Termination: either party may request termination with notice. Termination is final.\n\n"
        "Payment is due within thirty days. Late payment accrues interest on every payment."
    )
