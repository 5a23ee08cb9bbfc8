import asyncio
import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from events_api.core.entities.event import BlockEvent
from events_api.core.entities.pagination import PaginationInfo
from events_api.core.errors import EventDecodeError
from events_api.core.interfaces.event_store import IEventStore
from events_api.core.variants import EventVariant

logger = logging.getLogger(__name__)


class EventService:
    """
    Answers block windowed event queries for any event variant.

    `cache` is optional and needs `get`, `set` and `delete` (see RedisService).
    Only pages spanning the full number of requested blocks are cached, since
    a shorter page means the cursor reached the head of the table.
    """

    def __init__(self, store: IEventStore, cache=None, cache_ttl_seconds: int = 60):
        self.store = store
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

    async def fetch(
        self,
        variant: EventVariant,
        pagination: PaginationInfo,
        filter_values: Mapping[str, Optional[str]],
    ) -> List[BlockEvent]:
        pagination.check()
        params = variant.filters.bind(filter_values)

        key = self._cache_key(variant, pagination, params)
        cached = await self._cached_page(variant, key)
        if cached is not None:
            return cached

        rows = await self.store.fetch_block_window(
            variant,
            pagination.start_block_timestamp_nanosec,
            pagination.blocks,
            params,
        )
        events = self._decode(variant, rows)
        logger.debug(f"{variant.name}: {len(events)} events from {pagination.start_block_timestamp_nanosec}")

        if self.cache is not None and len({e.timestamp for e in events}) == pagination.blocks:
            page = [e.model_dump(mode="json") for e in events]
            await asyncio.to_thread(self.cache.set, key, page, self.cache_ttl_seconds)
        return events

    def _decode(self, variant: EventVariant, rows: List[Dict[str, Any]]) -> List[BlockEvent]:
        try:
            return [variant.model.model_validate(row) for row in rows]
        except ValidationError as e:
            logger.error(f"Malformed {variant.name} row: {e}")
            raise EventDecodeError(f"Could not decode {variant.name} row") from e

    async def _cached_page(self, variant: EventVariant, key: str) -> Optional[List[BlockEvent]]:
        if self.cache is None:
            return None
        page = await asyncio.to_thread(self.cache.get, key)
        if page is None:
            return None
        try:
            return [variant.model.model_validate(item) for item in page]
        except (ValidationError, TypeError) as e:
            logger.warning(f"Dropping unreadable cached page {key}: {e}")
            await asyncio.to_thread(self.cache.delete, key)
            return None

    @staticmethod
    def _cache_key(variant: EventVariant, pagination: PaginationInfo, params: Mapping[str, Any]) -> str:
        filters = json.dumps(params, sort_keys=True)
        return f"{variant.name}:{pagination.start_block_timestamp_nanosec}:{pagination.blocks}:{filters}"
