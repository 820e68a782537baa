"""
Neo4j Connection Manager
========================

Owns the single AsyncDriver used by every component of the adapter.

- Lazy initialization: the driver is created on the first session request
- Scoped sessions: acquired and closed around each operation
- Explicit lifecycle: connect() / close(), re-connect after close is supported
- Configuration validated before any network I/O

Usage:
    connection = Neo4jConnection(Neo4jConfig())

    async with connection.session() as session:
        records = await fetch_all(session, "MATCH (c:Chunk) RETURN count(c) AS count")

    await connection.close()
"""

import asyncio
import structlog
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession
from neo4j.exceptions import DriverError, Neo4jError

from vecgraph.errors import GraphConnectionError, QueryError, VectorStoreError
from vecgraph.storage.graph import cypher as statements
from vecgraph.storage.graph.config import Neo4jConfig

log = structlog.get_logger()


async def fetch_all(
    session: AsyncSession,
    cypher: str,
    params: Optional[Dict[str, Any]] = None
) -> List[Dict[str, Any]]:
    """
    Run a Cypher statement in an open session and collect every record.

    Raises:
        QueryError: the engine rejected or failed the statement
        GraphConnectionError: the connection dropped during the round trip
    """
    try:
        result = await session.run(cypher, params or {})
        return [record.data() async for record in result]
    except Neo4jError as e:
        raise QueryError(
            f"Query failed: {e}",
            details={"statement": " ".join(cypher.split())[:120], "code": getattr(e, "code", None)},
        ) from e
    except DriverError as e:
        raise GraphConnectionError(f"Connection lost during query: {e}") from e


async def fetch_one(
    session: AsyncSession,
    cypher: str,
    params: Optional[Dict[str, Any]] = None
) -> Optional[Dict[str, Any]]:
    """Run a statement and return its first record, or None."""
    records = await fetch_all(session, cypher, params)
    return records[0] if records else None


class Neo4jConnection:
    """
    Connection handle for the Neo4j backing engine.

    One instance owns exactly one physical driver. Sessions are lightweight and
    independently closeable; concurrent operations share the driver and the
    engine interleaves their work.

    Example:
        connection = Neo4jConnection(config)
        await connection.connect()
        healthy = await connection.health_check()
        await connection.close()
    """

    def __init__(self, config: Optional[Neo4jConfig] = None):
        self.config = config or Neo4jConfig()
        self._driver: Optional[AsyncDriver] = None
        self._connect_lock = asyncio.Lock()

        log.info(
            f"Neo4jConnection configured - "
            f"uri={self.config.uri}, database={self.config.database}"
        )

    @property
    def is_connected(self) -> bool:
        return self._driver is not None

    async def connect(self) -> AsyncDriver:
        """
        Create the driver and verify connectivity.

        Returns:
            AsyncDriver instance

        Raises:
            ConfigurationError: invalid configuration (no I/O attempted)
            GraphConnectionError: handshake failed, handle left unset
        """
        if self._driver is not None:
            log.debug("Neo4j driver already initialized, returning existing driver")
            return self._driver

        self.config.validate()

        # Double-checked: concurrent first callers share one driver
        async with self._connect_lock:
            if self._driver is not None:
                return self._driver

            log.info(
                "Neo4j::Attempting connection",
                uri=self.config.uri,
                user=self.config.username,
            )

            driver = AsyncGraphDatabase.driver(
                self.config.uri,
                auth=(self.config.username, self.config.password),
                max_connection_pool_size=self.config.max_connection_pool_size,
                connection_timeout=self.config.connection_timeout,
            )

            try:
                await driver.verify_connectivity()
            except (Neo4jError, DriverError, OSError) as e:
                log.error(f"Neo4j::Connection failed - {e}")
                await driver.close()
                raise GraphConnectionError(
                    f"Connection failed: {e}",
                    details={"uri": self.config.uri},
                ) from e

            self._driver = driver

        log.info("Neo4j::Connection established")
        return self._driver

    async def get_driver(self) -> AsyncDriver:
        """Return the driver, initializing it on first use."""
        if self._driver is None:
            await self.connect()
        return self._driver

    @asynccontextmanager
    async def session(self, database: Optional[str] = None) -> AsyncIterator[AsyncSession]:
        """
        Context manager for Neo4j sessions.

        The session is closed on every exit path.

        Usage:
            async with connection.session() as session:
                records = await fetch_all(session, "MATCH (n) RETURN n")
        """
        driver = await self.get_driver()
        async with driver.session(database=database or self.config.database) as session:
            yield session

    async def run(
        self,
        cypher: str,
        params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute a single statement in its own session and return the records."""
        async with self.session() as session:
            return await fetch_all(session, cypher, params)

    async def health_check(self) -> bool:
        """
        Check that the engine is reachable and answers queries.

        Returns:
            True if healthy, False otherwise
        """
        try:
            records = await self.run(statements.HEARTBEAT)
            return bool(records) and records[0].get("ok") == 1
        except VectorStoreError as e:
            log.error(f"Neo4j::Heartbeat failed - {e}")
            return False

    async def close(self) -> None:
        """
        Close the driver and reset state.

        Idempotent: calling close() on a closed connection is a no-op.
        """
        if self._driver is None:
            log.debug("Neo4j driver not initialized, nothing to close")
            return

        driver, self._driver = self._driver, None
        await driver.close()
        log.info("Neo4j::Disconnected")
