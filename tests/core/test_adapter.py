"""
Test Neo4jVectorStore
=====================

Public adapter surface end to end against the in-memory engine.
"""

import pytest
import pytest_asyncio
from unittest.mock import patch

from neo4j.exceptions import ClientError, ServiceUnavailable

from vecgraph.config import VecGraphSettings
from vecgraph.core import Neo4jVectorStore
from vecgraph.errors import ConfigurationError, GraphConnectionError
from vecgraph.pipeline import DocumentInput
from vecgraph.storage.graph import Neo4jConfig, cypher


@pytest.fixture
def make_store(fake_engine, neo4j_config, embedder, splitter):
    def _make(**kwargs):
        options = {
            "config": neo4j_config,
            "settings": VecGraphSettings(),
            "embedder": embedder,
            "splitter": splitter,
        }
        options.update(kwargs)
        return Neo4jVectorStore(**options)
    return _make


@pytest_asyncio.fixture
async def vector_store(make_store):
    store = make_store()
    await store.initialize()
    yield store
    await store.disconnect()


@pytest.fixture
def contract(sample_contract_text):
    return {"docId": "d1", "pageContent": sample_contract_text, "title": "MSA", "published": "2024-03-01"}


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_initialize_config_error_propagates(self, fake_engine, make_store):
        store = make_store(config=Neo4jConfig(password="x", vector_db="weaviate"))

        with pytest.raises(ConfigurationError):
            await store.initialize()

        assert fake_engine.drivers == []

    @pytest.mark.asyncio
    async def test_initialize_connection_error_propagates(self, fake_engine, make_store):
        fake_engine.connect_error = ServiceUnavailable("refused")
        store = make_store()

        with pytest.raises(GraphConnectionError):
            await store.initialize()

        assert not store.is_connected

    @pytest.mark.asyncio
    async def test_initialize_refreshes_existing_namespaces(self, fake_engine, make_store, contract):
        first = make_store()
        await first.initialize()
        await first.add_document_to_namespace("acme", contract)
        await first.add_document_to_namespace("globex", contract)
        await first.disconnect()
        knn_before = fake_engine.executed(cypher.KNN_WRITE)

        second = make_store()
        reports = await second.initialize()

        assert [r.namespace for r in reports] == ["acme", "globex"]
        assert all(r.ok for r in reports)
        assert fake_engine.executed(cypher.KNN_WRITE) == knn_before + 2
        await second.disconnect()

    @pytest.mark.asyncio
    async def test_initialize_without_refresh(self, fake_engine, make_store):
        settings = VecGraphSettings()
        settings.maintenance.refresh_on_initialize = False
        store = make_store(settings=settings)

        assert await store.initialize() == []
        assert fake_engine.executed(cypher.LIST_NAMESPACES) == 0

    @pytest.mark.asyncio
    async def test_heartbeat(self, fake_engine, vector_store):
        assert await vector_store.heartbeat() == {"heartbeat": True}

        fake_engine.failures[cypher.HEARTBEAT] = ClientError("down")
        assert await vector_store.heartbeat() == {"heartbeat": False}

    @pytest.mark.asyncio
    async def test_disconnect_then_lazy_reconnect(self, fake_engine, vector_store):
        await vector_store.disconnect()
        await vector_store.disconnect()
        assert not vector_store.is_connected

        assert await vector_store.namespace_count("acme") == 0
        assert vector_store.is_connected
        assert len(fake_engine.drivers) == 2


class TestScenario:

    @pytest.mark.asyncio
    async def test_acme_scenario(self, vector_store, contract):
        result = await vector_store.add_document_to_namespace("acme", contract)
        assert result.vectorized is True
        assert await vector_store.namespace_count("acme") == 3

        search = await vector_store.perform_similarity_search(
            "acme", "termination notice", similarity_threshold=0.1, top_n=2
        )
        assert 0 < len(search) <= 2
        assert all(score >= 0.1 for score in search.scores)
        assert search.scores == sorted(search.scores, reverse=True)
        assert search.context_texts[0].startswith("Termination")

        assert await vector_store.delete_document_from_namespace("acme", "d1") is True
        assert await vector_store.namespace_count("acme") == 0
        assert await vector_store.has_namespace("acme") is False

    @pytest.mark.asyncio
    async def test_namespace_isolation(self, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)
        await vector_store.add_document_to_namespace(
            "globex", {"docId": "g1", "pageContent": "Privacy policy. Privacy matters."}
        )

        result = await vector_store.perform_similarity_search("globex", "contract payment", similarity_threshold=0.0)

        assert result.context_texts == ["Privacy policy. Privacy matters."]
        assert await vector_store.namespace_stats(namespace="acme") == {"vectorCount": 3}

    @pytest.mark.asyncio
    async def test_sources_carry_metadata(self, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)

        result = await vector_store.perform_similarity_search("acme", "payment", similarity_threshold=0.1, top_n=1)

        assert result.sources[0]["title"] == "MSA"
        assert result.sources[0]["published"] == "2024-03-01"
        assert result.sources[0]["text"] == result.context_texts[0]

    @pytest.mark.asyncio
    async def test_filter_identifiers(self, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)

        result = await vector_store.perform_similarity_search(
            "acme", "payment", similarity_threshold=0.0, filter_identifiers=["d1"]
        )

        assert len(result) == 0

    @pytest.mark.asyncio
    async def test_filter_identifiers_none(self, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)

        result = await vector_store.perform_similarity_search(
            "acme", "payment", similarity_threshold=0.1, filter_identifiers=None
        )

        assert result.error is None
        assert result.context_texts[0].startswith("Payment")


class TestNamespaceOperations:

    @pytest.mark.asyncio
    async def test_empty_namespace_search_skips_embedder(self, vector_store, embedder):
        result = await vector_store.perform_similarity_search("acme", "payment")

        assert result.message == "No chunks found in namespace acme"
        assert embedder.embed_calls == 0

    @pytest.mark.asyncio
    async def test_namespace_required(self, vector_store):
        with pytest.raises(ValueError, match="namespace required"):
            await vector_store.namespace_stats()
        with pytest.raises(ValueError, match="namespace required"):
            await vector_store.delete_namespace()

    @pytest.mark.asyncio
    async def test_delete_namespace(self, fake_engine, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)
        assert "chunkGraph_acme" in fake_engine.projections

        result = await vector_store.delete_namespace(namespace="acme")

        assert result == {"message": "Namespace acme was deleted along with 3 vectors."}
        assert "chunkGraph_acme" not in fake_engine.projections
        assert fake_engine.edges == []

    @pytest.mark.asyncio
    async def test_delete_unknown_document_skips_maintenance(self, fake_engine, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)
        knn_before = fake_engine.executed(cypher.KNN_WRITE)

        assert await vector_store.delete_document_from_namespace("acme", "missing") is False
        assert fake_engine.executed(cypher.KNN_WRITE) == knn_before

    @pytest.mark.asyncio
    async def test_delete_last_document_drops_projection(self, fake_engine, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)
        await vector_store.add_document_to_namespace("globex", contract)

        assert await vector_store.delete_document_from_namespace("acme", "d1") is True

        assert "chunkGraph_acme" not in fake_engine.projections
        assert "chunkGraph_globex" in fake_engine.projections

    @pytest.mark.asyncio
    async def test_delete_document_refreshes_graph(self, fake_engine, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)
        await vector_store.add_document_to_namespace(
            "acme", {"docId": "d2", "pageContent": "Liability is capped.\n\nPayment of liability."}
        )

        await vector_store.delete_document_from_namespace("acme", "d2")

        remaining = {n["chunkId"] for n in fake_engine.chunks("acme")}
        assert len(remaining) == 3
        assert fake_engine.edges
        for edge in fake_engine.edges:
            assert edge["source"] in remaining and edge["target"] in remaining

    @pytest.mark.asyncio
    async def test_list_documents(self, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)

        documents = await vector_store.list_documents_in_namespace("acme")

        assert documents == [{
            "docId": "d1",
            "chunkCount": 3,
            "metadata": {
                "title": "MSA",
                "published": "2024-03-01",
                "text": documents[0]["metadata"]["text"],
            },
            "preview": documents[0]["preview"],
        }]
        assert documents[0]["preview"].startswith("This contract")

    @pytest.mark.asyncio
    async def test_refresh_namespace(self, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)

        report = await vector_store.refresh_namespace("acme")

        assert report.ok
        assert report.edges_written == 6

    @pytest.mark.asyncio
    async def test_reset(self, fake_engine, vector_store, contract):
        await vector_store.add_document_to_namespace("acme", contract)
        await vector_store.add_document_to_namespace("globex", contract)

        assert await vector_store.reset() == {"reset": True}
        assert fake_engine.nodes == []
        assert fake_engine.projections == {}


class TestErrorBoundary:
    """Per-operation errors are returned, never raised."""

    @pytest.mark.asyncio
    async def test_invalid_namespace(self, fake_engine, vector_store):
        assert await vector_store.has_namespace("bad name") is False
        assert "error" in await vector_store.namespace_count("bad name")
        assert "error" in await vector_store.namespace_stats(namespace="bad name")
        assert await vector_store.delete_document_from_namespace("bad name", "d1") is False
        assert "error" in await vector_store.list_documents_in_namespace("bad name")

    @pytest.mark.asyncio
    async def test_query_failure(self, fake_engine, vector_store):
        fake_engine.failures[cypher.COUNT_CHUNKS] = ClientError("engine down")

        result = await vector_store.namespace_count("acme")

        assert result["error"].startswith("Query failed")

    @pytest.mark.asyncio
    async def test_corrupt_stored_metadata(self, fake_engine, vector_store):
        fake_engine.nodes.append({
            "namespace": "acme",
            "docId": "d1",
            "chunkId": "c1",
            "pageContent": "Payment terms.",
            "metadata": "{not json",
            "embedding": [0.1] * 6,
        })

        result = await vector_store.list_documents_in_namespace("acme")

        assert result["error"].startswith("Stored metadata is not valid JSON")

    @pytest.mark.asyncio
    async def test_reset_failure(self, fake_engine, vector_store):
        fake_engine.failures[cypher.RESET_ALL] = ClientError("forbidden")

        assert "error" in await vector_store.reset()

    @pytest.mark.asyncio
    async def test_empty_document(self, vector_store):
        assert await vector_store.add_document_to_namespace("acme", {"docId": "d1", "pageContent": ""}) is False

    @pytest.mark.asyncio
    async def test_document_input_accepted(self, vector_store):
        result = await vector_store.add_document_to_namespace(
            "acme", DocumentInput(doc_id="d1", page_content="Payment terms.")
        )

        assert result.vectorized is True

    @pytest.mark.asyncio
    async def test_missing_default_embedder(self, make_store, contract):
        store = make_store(embedder=None)
        await store.initialize()

        with patch("vecgraph.core.adapter.HAS_EMBEDDING_SERVICE", False):
            ingest = await store.add_document_to_namespace("acme", contract)
            search = await store.perform_similarity_search("acme", "payment")

        assert ingest.vectorized is False
        assert "No embedder configured" in ingest.error
        assert "No embedder configured" in search.error
        await store.disconnect()
