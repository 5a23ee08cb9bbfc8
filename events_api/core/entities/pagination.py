from typing import Sequence

from pydantic import BaseModel

from events_api.core.entities.event import BlockEvent
from events_api.core.errors import MAX_BLOCKS_PER_REQUEST, BlocksOutOfRange

DEFAULT_BLOCKS_PER_REQUEST = 10


class PaginationInfo(BaseModel):
    """
    Block windowed cursor. Fully supplied by the caller on every request.
    """
    start_block_timestamp_nanosec: int = 0
    blocks: int = DEFAULT_BLOCKS_PER_REQUEST

    def check(self) -> "PaginationInfo":
        if self.blocks < 1 or self.blocks > MAX_BLOCKS_PER_REQUEST:
            raise BlocksOutOfRange(self.blocks)
        return self


def next_cursor(events: Sequence[BlockEvent], start_block_timestamp_nanosec: int) -> int:
    """
    Start of the next page: the last block of this page, or the current start
    if the page is empty (no more data yet).
    """
    if not events:
        return start_block_timestamp_nanosec
    return max(e.timestamp for e in events)
