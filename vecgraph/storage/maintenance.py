"""
Index/Graph Maintainer
======================

Keeps the vector index, the in-memory GDS projection and the SIMILAR_TO KNN
edges consistent with the chunks of a namespace.

Pipeline (idempotent, runs per namespace):
1. Dimension discovery   sample one embedding; none -> pass skipped
2. Vector index          create if absent, ALREADY_PRESENT if equivalent
3. Graph projection      drop-then-recreate
4. KNN edges             delete namespace edges, gds.knn.write top-K

Each step is isolated: a failure is logged and recorded in the report, and
never rolls back the chunk writes that triggered the pass. Queries keep being
served against the previous (or absent) graph until the next successful pass.
"""

import structlog
from typing import Any, Dict, Optional

from neo4j import AsyncSession

from vecgraph.config import MaintenanceSettings
from vecgraph.errors import MaintenanceError, VectorStoreError
from vecgraph.storage.graph import cypher
from vecgraph.storage.graph.connection import Neo4jConnection, fetch_all, fetch_one
from vecgraph.storage.models import IndexStatus, MaintenanceReport, validate_namespace

log = structlog.get_logger()


def _index_dimension(options: Optional[Dict[str, Any]]) -> Optional[int]:
    """Extract `vector.dimensions` from SHOW INDEXES options."""
    if not options:
        return None
    index_config = options.get("indexConfig") or {}
    value = index_config.get("vector.dimensions")
    return int(value) if value is not None else None


class IndexGraphMaintainer:
    """
    Rebuilds the derived similarity structures of a namespace.

    Example:
        maintainer = IndexGraphMaintainer(connection, MaintenanceSettings(top_k=5))
        report = await maintainer.refresh("acme")
        print(report.summary())
    """

    def __init__(
        self,
        connection: Neo4jConnection,
        settings: Optional[MaintenanceSettings] = None
    ):
        self.connection = connection
        self.settings = settings or MaintenanceSettings()

    async def refresh(self, namespace: str) -> MaintenanceReport:
        """
        Run the full maintenance pipeline for a namespace.

        Never raises for engine failures: they end up in report.errors.

        Returns:
            MaintenanceReport
        """
        validate_namespace(namespace)
        report = MaintenanceReport(namespace=namespace)

        try:
            async with self.connection.session() as session:
                await self._run_pipeline(session, report)
        except VectorStoreError as e:
            self._fail(report, "session", e)

        log.info("Maintenance::Pass completed", **report.summary())
        return report

    async def _run_pipeline(self, session: AsyncSession, report: MaintenanceReport) -> None:
        try:
            report.dimension = await self._discover_dimension(session, report.namespace)
        except VectorStoreError as e:
            self._fail(report, "dimension discovery", e)
            return

        if report.dimension is None:
            log.info(f"Maintenance::No embeddings found in {report.namespace}, skipping")
            return

        report.index_status = await self._ensure_vector_index(session, report)
        if report.index_status in (IndexStatus.FAILED, IndexStatus.CONFLICT):
            return

        if not await self._rebuild_projection(session, report):
            return

        await self._rebuild_knn_edges(session, report)

    def _fail(self, report: MaintenanceReport, step: str, error: Exception) -> None:
        message = f"{step} failed: {error}"
        report.errors.append(message)
        log.error(
            f"Maintenance::{message}",
            namespace=report.namespace,
            error=MaintenanceError(message).asdict(),
        )

    async def _discover_dimension(self, session: AsyncSession, namespace: str) -> Optional[int]:
        record = await fetch_one(session, cypher.EMBEDDING_DIMENSION, {"namespace": namespace})
        if not record or record.get("dimension") is None:
            return None
        return int(record["dimension"])

    async def _ensure_vector_index(
        self,
        session: AsyncSession,
        report: MaintenanceReport
    ) -> IndexStatus:
        """
        Create the cosine vector index on :Chunk(embedding) if absent.

        An existing index with the same dimension is a success; one with a
        different dimension is a conflict and stops the pass.
        """
        try:
            existing = await fetch_one(
                session, cypher.SHOW_VECTOR_INDEX, {"name": cypher.VECTOR_INDEX_NAME}
            )
            if existing is not None:
                existing_dim = _index_dimension(existing.get("options"))
                if existing_dim is None or existing_dim == report.dimension:
                    log.debug("Maintenance::Vector index already present")
                    return IndexStatus.ALREADY_PRESENT

                report.errors.append(
                    f"vector index dimension {existing_dim} conflicts with "
                    f"namespace dimension {report.dimension}"
                )
                log.error(
                    "Maintenance::Vector index conflict",
                    namespace=report.namespace,
                    index_dimension=existing_dim,
                    namespace_dimension=report.dimension,
                )
                return IndexStatus.CONFLICT

            await fetch_all(
                session,
                cypher.CREATE_VECTOR_INDEX,
                {"name": cypher.VECTOR_INDEX_NAME, "dimension": report.dimension},
            )
            log.info(f"Maintenance::Vector index created (dimension={report.dimension})")
            return IndexStatus.CREATED

        except VectorStoreError as e:
            self._fail(report, "vector index", e)
            return IndexStatus.FAILED

    async def _rebuild_projection(self, session: AsyncSession, report: MaintenanceReport) -> bool:
        graph_name = cypher.projection_name(report.namespace)
        try:
            await self._drop_projection(session, graph_name)
            record = await fetch_one(
                session,
                cypher.PROJECT_GRAPH,
                {"namespace": report.namespace, "graphName": graph_name},
            )
        except VectorStoreError as e:
            self._fail(report, "graph projection", e)
            return False

        report.projection = graph_name
        report.projected_nodes = int(record["nodeCount"]) if record else 0
        log.info(
            f"Maintenance::Graph projected: {graph_name}, Nodes: {report.projected_nodes}"
        )
        return True

    async def _rebuild_knn_edges(self, session: AsyncSession, report: MaintenanceReport) -> None:
        try:
            record = await fetch_one(
                session, cypher.DELETE_SIMILARITY_EDGES, {"namespace": report.namespace}
            )
            report.edges_deleted = int(record["deleted"]) if record else 0

            record = await fetch_one(
                session,
                cypher.KNN_WRITE,
                {
                    "graphName": report.projection,
                    "topK": self.settings.top_k,
                    "similarityCutoff": self.settings.similarity_cutoff,
                    "concurrency": self.settings.concurrency,
                    "randomSeed": self.settings.random_seed,
                },
            )
            report.edges_written = int(record["relationshipsWritten"]) if record else 0
        except VectorStoreError as e:
            self._fail(report, "knn computation", e)

    async def _drop_projection(self, session: AsyncSession, graph_name: str) -> bool:
        record = await fetch_one(session, cypher.GRAPH_EXISTS, {"graphName": graph_name})
        if record and record.get("exists"):
            await fetch_all(session, cypher.GRAPH_DROP, {"graphName": graph_name})
            log.info(f"Maintenance::Existing graph dropped: {graph_name}")
            return True
        return False

    async def drop_projection(self, namespace: str) -> bool:
        """Drop the namespace projection if it exists (namespace deletion)."""
        validate_namespace(namespace)
        async with self.connection.session() as session:
            return await self._drop_projection(session, cypher.projection_name(namespace))

    async def drop_all_projections(self) -> int:
        """Drop every chunk projection (global reset)."""
        dropped = 0
        async with self.connection.session() as session:
            records = await fetch_all(session, cypher.LIST_PROJECTIONS)
            for record in records:
                name = record.get("graphName") or ""
                if name.startswith(cypher.PROJECTION_PREFIX):
                    await fetch_all(session, cypher.GRAPH_DROP, {"graphName": name})
                    dropped += 1
        return dropped
