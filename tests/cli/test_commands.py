"""
Test vecgraph CLI
=================

Commands run against a mocked Neo4jVectorStore.
"""

import json
import pytest
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from vecgraph.cli import cli
from vecgraph.errors import GraphConnectionError
from vecgraph.pipeline import IngestionResult
from vecgraph.storage.models import MaintenanceReport
from vecgraph.storage.retriever import SearchResult


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("vecgraph.cli.commands.configure_logging"):
        yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def vector_store():
    with patch("vecgraph.cli.commands.Neo4jVectorStore") as store_cls:
        store = store_cls.return_value
        store.initialize = AsyncMock(return_value=[])
        store.disconnect = AsyncMock()
        yield store


class TestHeartbeat:

    def test_reachable(self, runner, vector_store):
        vector_store.heartbeat = AsyncMock(return_value={"heartbeat": True})

        result = runner.invoke(cli, ["heartbeat"])

        assert result.exit_code == 0
        assert "✅ Neo4j is reachable" in result.output
        vector_store.disconnect.assert_awaited_once()

    def test_unreachable(self, runner, vector_store):
        vector_store.heartbeat = AsyncMock(return_value={"heartbeat": False})

        result = runner.invoke(cli, ["heartbeat"])

        assert result.exit_code == 1

    def test_connection_error(self, runner, vector_store):
        vector_store.initialize.side_effect = GraphConnectionError("Connection failed: refused")

        result = runner.invoke(cli, ["heartbeat"])

        assert result.exit_code == 1
        assert "❌ Connection failed: refused" in result.output
        vector_store.disconnect.assert_awaited_once()


class TestNamespaceCommands:

    def test_stats(self, runner, vector_store):
        vector_store.namespace_stats = AsyncMock(return_value={"vectorCount": 3})

        result = runner.invoke(cli, ["stats", "acme"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"vectorCount": 3}
        vector_store.namespace_stats.assert_awaited_once_with(namespace="acme")

    def test_list(self, runner, vector_store):
        vector_store.list_documents_in_namespace = AsyncMock(return_value=[
            {"docId": "d1", "chunkCount": 3, "metadata": {}, "preview": "This contract"},
        ])

        result = runner.invoke(cli, ["list", "acme"])

        assert result.exit_code == 0
        assert "d1" in result.output
        assert "Total: 1 documents" in result.output

    def test_list_error(self, runner, vector_store):
        vector_store.list_documents_in_namespace = AsyncMock(return_value={"error": "boom"})

        result = runner.invoke(cli, ["list", "acme"])

        assert result.exit_code == 1
        assert "❌ boom" in result.output

    def test_delete_namespace(self, runner, vector_store):
        vector_store.delete_namespace = AsyncMock(
            return_value={"message": "Namespace acme was deleted along with 3 vectors."}
        )

        result = runner.invoke(cli, ["delete-namespace", "acme"])

        assert result.exit_code == 0
        assert "deleted along with 3 vectors" in result.output

    def test_delete_document_missing(self, runner, vector_store):
        vector_store.delete_document_from_namespace = AsyncMock(return_value=False)

        result = runner.invoke(cli, ["delete-document", "acme", "d1"])

        assert result.exit_code == 1

    def test_refresh(self, runner, vector_store):
        vector_store.refresh_namespace = AsyncMock(
            return_value=MaintenanceReport(namespace="acme", dimension=6, edges_written=6)
        )

        result = runner.invoke(cli, ["refresh", "acme"])

        assert result.exit_code == 0
        assert json.loads(result.output)["edges_written"] == 6

    def test_refresh_with_errors(self, runner, vector_store):
        vector_store.refresh_namespace = AsyncMock(
            return_value=MaintenanceReport(namespace="acme", errors=["knn computation failed: x"])
        )

        result = runner.invoke(cli, ["refresh", "acme"])

        assert result.exit_code == 1
        assert "knn computation failed" in result.output


class TestIngest:

    def test_ingest_file(self, runner, vector_store, tmp_path):
        source = tmp_path / "msa.txt"
        source.write_text("Payment is due within thirty days.", encoding="utf-8")
        vector_store.add_document_to_namespace = AsyncMock(
            return_value=IngestionResult(vectorized=True, chunk_count=1)
        )

        result = runner.invoke(cli, ["ingest", "acme", str(source), "--title", "MSA"])

        assert result.exit_code == 0
        assert "✅ Ingested 1 chunks into acme" in result.output

        namespace, document = vector_store.add_document_to_namespace.call_args.args
        assert namespace == "acme"
        assert document.doc_id == "msa.txt"
        assert document.metadata["title"] == "MSA"
        assert vector_store.add_document_to_namespace.call_args.kwargs["full_file_path"] == str(source.resolve())

    def test_ingest_failure(self, runner, vector_store, tmp_path):
        source = tmp_path / "msa.txt"
        source.write_text("Payment.", encoding="utf-8")
        vector_store.add_document_to_namespace = AsyncMock(
            return_value=IngestionResult(vectorized=False, error="Could not embed document")
        )

        result = runner.invoke(cli, ["ingest", "acme", str(source)])

        assert result.exit_code == 1
        assert "Could not embed document" in result.output


class TestSearch:

    def test_search(self, runner, vector_store):
        vector_store.perform_similarity_search = AsyncMock(return_value=SearchResult(
            context_texts=["Payment is due."], sources=[{"title": "MSA"}], scores=[0.7],
        ))

        result = runner.invoke(cli, [
            "search", "acme", "payment", "--top-n", "2", "--knn-depth", "0", "--exclude", "d2",
        ])

        assert result.exit_code == 0
        assert json.loads(result.output)["contextTexts"] == ["Payment is due."]
        kwargs = vector_store.perform_similarity_search.call_args.kwargs
        assert kwargs["top_n"] == 2
        assert kwargs["knn_depth"] == 0
        assert kwargs["similarity_threshold"] is None
        assert tuple(kwargs["filter_identifiers"]) == ("d2",)

    def test_search_error(self, runner, vector_store):
        vector_store.perform_similarity_search = AsyncMock(
            return_value=SearchResult.empty("Similarity search failed for namespace acme", error="boom")
        )

        result = runner.invoke(cli, ["search", "acme", "payment"])

        assert result.exit_code == 1


class TestReset:

    def test_requires_confirmation(self, runner, vector_store):
        vector_store.reset = AsyncMock(return_value={"reset": True})

        result = runner.invoke(cli, ["reset"])

        assert result.exit_code == 1
        vector_store.reset.assert_not_awaited()

    def test_reset(self, runner, vector_store):
        vector_store.reset = AsyncMock(return_value={"reset": True})

        result = runner.invoke(cli, ["reset", "--yes"])

        assert result.exit_code == 0
        assert "✅ Database reset" in result.output
