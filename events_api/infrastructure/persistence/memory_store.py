from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping

from events_api.core.interfaces.event_store import IEventStore
from events_api.core.use_cases.block_window import select_block_window
from events_api.core.variants import EventVariant


def _sort_value(value: Any):
    # NULLS LAST, as Postgres does for ascending order
    return (value is None, value if value is not None else "")


class InMemoryEventStore(IEventStore):
    """
    Local event store holding rows in memory. Applies the same filter fields
    and block window rules as the Postgres store; used for tests and demos.
    Rows use column names and carry block time as integer nanoseconds in `timestamp`.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.fetch_count = 0

    def describe(self) -> str:
        return "memory"

    def add(self, table: str, rows: Iterable[Mapping[str, Any]]) -> "InMemoryEventStore":
        self.tables[table].extend(dict(r) for r in rows)
        return self

    async def fetch_block_window(
        self,
        variant: EventVariant,
        start_block_timestamp_nanosec: int,
        blocks: int,
        filter_params: Mapping[str, Any],
    ) -> List[Dict[str, Any]]:
        self.fetch_count += 1
        matching = [
            row for row in self.tables[variant.table]
            if variant.filters.matches(row, filter_params)
        ]
        window = set(select_block_window(
            (row["timestamp"] for row in matching),
            start_block_timestamp_nanosec,
            blocks,
        ))
        page = [dict(row) for row in matching if row["timestamp"] in window]
        page.sort(key=lambda row: (row["timestamp"],) + tuple(_sort_value(row.get(c)) for c in variant.order_by))
        return page
