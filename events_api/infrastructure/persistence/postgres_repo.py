import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import psycopg2
from psycopg2 import pool as pg_pool
from psycopg2.extras import RealDictCursor

from events_api.core.errors import EventFetchError
from events_api.core.interfaces.event_store import IEventStore
from events_api.core.use_cases.block_window import block_time_lower_bound
from events_api.core.variants import EventVariant

logger = logging.getLogger(__name__)


class PostgresEventStore(IEventStore):
    """
    Read-only access to the indexed event tables.

    psycopg2 is blocking, so every statement runs in a worker thread. A
    semaphore sized to the pool keeps requests waiting instead of failing
    when all connections are busy.
    """

    def __init__(self, dsn: str, min_conn: int = 1, max_conn: int = 10, statement_timeout_ms: int = 30000):
        self.dsn = dsn
        self.max_conn = max_conn
        self._pool = pg_pool.ThreadedConnectionPool(
            min_conn,
            max_conn,
            dsn,
            options=f"-c statement_timeout={statement_timeout_ms}",
        )
        self._slots = asyncio.Semaphore(max_conn)
        self._queries = {}
        logger.info(f"Postgres pool ready ({min_conn}..{max_conn} connections)")

    def describe(self) -> str:
        return "postgres"

    def close(self) -> None:
        self._pool.closeall()
        logger.info("Postgres pool closed.")

    def _query_for(self, variant: EventVariant) -> str:
        if variant.name not in self._queries:
            self._queries[variant.name] = variant.query()
        return self._queries[variant.name]

    def _run(self, query: str, params: Dict[str, Any], holder: Dict[str, Any]) -> List[Dict[str, Any]]:
        conn = self._pool.getconn()
        holder["conn"] = conn
        try:
            conn.set_session(readonly=True, autocommit=True)
            cur = conn.cursor(cursor_factory=RealDictCursor)
            try:
                cur.execute(query, params)
                return [dict(row) for row in cur.fetchall()]
            finally:
                cur.close()
        finally:
            holder.pop("conn", None)
            self._pool.putconn(conn)

    async def fetch_block_window(
        self,
        variant: EventVariant,
        start_block_timestamp_nanosec: int,
        blocks: int,
        filter_params: Mapping[str, Any],
    ) -> List[Dict[str, Any]]:
        params = dict(filter_params)
        params["start_block_timestamp"] = block_time_lower_bound(start_block_timestamp_nanosec)
        params["blocks"] = blocks
        query = self._query_for(variant)

        holder: Dict[str, Any] = {}
        async with self._slots:
            work = asyncio.ensure_future(asyncio.to_thread(self._run, query, params, holder))
            try:
                return await asyncio.shield(work)
            except asyncio.CancelledError:
                # Client went away: ask the backend to abort the running statement,
                # and keep the slot until the worker has returned its connection.
                conn: Optional[Any] = holder.get("conn")
                if conn is not None:
                    conn.cancel()
                await asyncio.wait([work])
                if not work.cancelled() and work.exception() is not None:
                    logger.info(f"Cancelled {variant.name} query ended with: {work.exception()}")
                raise
            except (psycopg2.Error, pg_pool.PoolError) as e:
                logger.error(f"Failed to fetch {variant.name} events: {e}")
                raise EventFetchError(f"{variant.name} query failed") from e
