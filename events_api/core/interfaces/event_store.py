from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from events_api.core.variants import EventVariant


class IEventStore(ABC):
    @abstractmethod
    async def fetch_block_window(
        self,
        variant: EventVariant,
        start_block_timestamp_nanosec: int,
        blocks: int,
        filter_params: Mapping[str, Any],
    ) -> List[Dict[str, Any]]:
        """
        Returns raw rows of every event in the selected block window that
        matches `filter_params`, ordered by timestamp then `variant.order_by`.
        Each row carries the block time as integer nanoseconds under `timestamp`.
        Raises EventFetchError on any storage failure.
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        pass

    def close(self) -> None:
        pass
