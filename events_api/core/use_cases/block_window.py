"""
Block windowed pagination.

A page is measured in blocks, not rows: the window is the first `blocks`
distinct timestamps at or after the cursor that hold at least one matching
event, and the page is every matching event in those blocks. A block is
never split across two pages.
"""
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Sequence

NANOS_EXPR = "(extract(epoch from {column}) * 1000000000)"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def select_block_window(timestamps: Iterable[int], start_block_timestamp_nanosec: int, blocks: int) -> List[int]:
    window = sorted({t for t in timestamps if t >= start_block_timestamp_nanosec})
    return window[:blocks]


def block_time_lower_bound(start_block_timestamp_nanosec: int) -> datetime:
    """
    The cursor as a timestamp the stored column can be compared to directly.
    Stored block times have microsecond precision, so `t * 1000 >= start`
    holds exactly when `t >= ceil(start / 1000)` microseconds.
    """
    micros = -(-start_block_timestamp_nanosec // 1000)
    return EPOCH + timedelta(microseconds=micros)


def block_window_query(table: str, columns: Sequence[str], condition: str, sort_keys: Sequence[str]) -> str:
    """
    Renders the two step query: a CTE that selects the window, then every
    row of those blocks that passes the same condition.
    `sort_keys` are SQL expressions over alias `e` ordering rows inside a block.
    Expects %(start_block_timestamp)s and %(blocks)s parameters
    plus whatever the condition references.
    """
    select_list = ", ".join(f"e.{c}" for c in columns)
    nanos = NANOS_EXPR.format(column="e.timestamp")
    ordering = ", ".join(["e.timestamp ASC"] + [f"{key} ASC" for key in sort_keys])
    return f"""
WITH blocks AS (
    SELECT DISTINCT e.timestamp AS t
    FROM {table} e
    WHERE e.timestamp >= %(start_block_timestamp)s
    AND {condition}
    ORDER BY t
    LIMIT %(blocks)s
)
SELECT {select_list}, {nanos}::BIGINT AS timestamp
FROM {table} e
INNER JOIN blocks ON e.timestamp = blocks.t
WHERE {condition}
ORDER BY {ordering}
"""
