from datetime import datetime, timezone

from events_api.core.entities.nft import NftMintEvent
from events_api.core.entities.pagination import next_cursor
from events_api.core.use_cases.block_window import EPOCH, block_time_lower_bound, select_block_window
from events_api.core.variants import NFT_TRANSFER, POTLOCK_DONATION


def test_window_is_distinct_sorted_and_limited():
    assert select_block_window([300, 100, 100, 200, 400], 0, 3) == [100, 200, 300]


def test_window_start_is_inclusive():
    assert select_block_window([100, 200, 300], 200, 10) == [200, 300]


def test_window_can_be_empty():
    assert select_block_window([100, 200], 201, 5) == []
    assert select_block_window([], 0, 5) == []


def test_query_selects_window_then_rows_with_same_condition():
    sql = NFT_TRANSFER.query()
    condition = NFT_TRANSFER.filters.condition()
    assert sql.count(condition) == 2
    assert "SELECT DISTINCT e.timestamp AS t" in sql
    assert "LIMIT %(blocks)s" in sql
    assert "WHERE e.timestamp >= %(start_block_timestamp)s" in sql
    assert "extract(epoch from e.timestamp) * 1000000000) >=" not in sql
    assert "INNER JOIN blocks ON e.timestamp = blocks.t" in sql
    assert "::BIGINT AS timestamp" in sql


def test_query_orders_by_timestamp_then_tiebreak():
    sql = POTLOCK_DONATION.query()
    assert 'ORDER BY e.timestamp ASC, e.receipt_id COLLATE "C" ASC, e.donation_id ASC' in sql


def test_text_tiebreak_columns_sort_by_code_point():
    sql = NFT_TRANSFER.query()
    assert 'e.receipt_id COLLATE "C" ASC, e.contract_id COLLATE "C" ASC' in sql
    assert 'e.token_ids COLLATE "C" ASC' in sql


def test_lower_bound_is_exact_on_microsecond_boundaries():
    assert block_time_lower_bound(0) == EPOCH
    assert block_time_lower_bound(1000) == datetime(1970, 1, 1, 0, 0, 0, 1, tzinfo=timezone.utc)


def test_lower_bound_rounds_partial_microseconds_up():
    bound = block_time_lower_bound(1_700_000_000_123_456_789)
    assert bound == datetime(2023, 11, 14, 22, 13, 20, 123457, tzinfo=timezone.utc)
    # A block stored at ...123456 us is 789 ns before the cursor and stays excluded
    assert block_time_lower_bound(1_700_000_000_123_456_000).microsecond == 123456


def _mint(timestamp):
    return NftMintEvent(
        transaction_id="tx", receipt_id="r", block_height=1, timestamp=timestamp,
        owner_id="alice", token_ids=["1"], contract_id="nft.near",
    )


def test_next_cursor_is_last_block_of_page():
    assert next_cursor([_mint(100), _mint(100), _mint(250)], 0) == 250


def test_next_cursor_unchanged_when_page_empty():
    assert next_cursor([], 777) == 777
