from events_api.core.filters import AnyOf, Equals, FilterSpec, HasAnyKey, parse_candidates
from events_api.core.variants import NFT_TRANSFER, TRADE_SWAP, VARIANTS


ROWS = [
    {"contract_id": "a.near", "old_owner_id": "alice", "new_owner_id": "carol"},
    {"contract_id": "a.near", "old_owner_id": "dave", "new_owner_id": "bob"},
    {"contract_id": "b.near", "old_owner_id": "erin", "new_owner_id": "frank"},
]


def test_parse_candidates():
    assert parse_candidates(None) is None
    assert parse_candidates("alice,bob") == ["alice", "bob"]
    assert parse_candidates(" alice , ,bob,") == ["alice", "bob"]
    assert parse_candidates(",") is None


def test_no_filters_match_everything():
    bound = NFT_TRANSFER.filters.bind({})
    assert all(v is None for v in bound.values())
    assert all(NFT_TRANSFER.filters.matches(row, bound) for row in ROWS)


def test_empty_spec_renders_true():
    assert FilterSpec().condition() == "TRUE"


def test_single_equality_filter_is_subset():
    bound = NFT_TRANSFER.filters.bind({"token_account_id": "a.near"})
    matched = [row for row in ROWS if NFT_TRANSFER.filters.matches(row, bound)]
    assert matched == ROWS[:2]


def test_filters_combine_with_and():
    bound = NFT_TRANSFER.filters.bind({"token_account_id": "a.near", "old_owner_id": "dave"})
    matched = [row for row in ROWS if NFT_TRANSFER.filters.matches(row, bound)]
    assert matched == [ROWS[1]]


def test_membership_matches_either_column():
    bound = NFT_TRANSFER.filters.bind({"involved_account_ids": "alice,bob"})
    assert bound["involved_account_ids"] == ["alice", "bob"]
    matched = [row for row in ROWS if NFT_TRANSFER.filters.matches(row, bound)]
    assert matched == ROWS[:2]


def test_unknown_parameters_are_ignored():
    bound = NFT_TRANSFER.filters.bind({"unknown": "x", "old_owner_id": None})
    assert "unknown" not in bound


def test_has_any_key_on_json_payload():
    spec = FilterSpec(HasAnyKey("tokens", "balance_changes"))
    row = {"balance_changes": {"wrap.near": "-1", "usdt.near": "3"}}
    assert spec.matches(row, spec.bind({"tokens": "usdt.near,dai.near"}))
    assert not spec.matches(row, spec.bind({"tokens": "dai.near"}))
    assert not spec.matches({"balance_changes": None}, spec.bind({"tokens": "dai.near"}))


def test_has_any_key_on_array_and_string_payloads():
    spec = FilterSpec(HasAnyKey("tokens", "balance_changes"))
    bound = spec.bind({"tokens": "usdt.near,dai.near"})
    assert spec.matches({"balance_changes": ["wrap.near", "usdt.near"]}, bound)
    assert not spec.matches({"balance_changes": ["wrap.near", 3]}, bound)
    assert spec.matches({"balance_changes": "dai.near"}, bound)
    assert not spec.matches({"balance_changes": 42}, bound)


def test_sql_is_tri_state():
    assert Equals("donor_id").sql() == "(%(donor_id)s::TEXT IS NULL OR donor_id = %(donor_id)s)"
    assert AnyOf("ids", ("a", "b")).sql() == "(%(ids)s::TEXT[] IS NULL OR ARRAY[a, b] && %(ids)s::TEXT[])"
    assert "balance_changes ?| %(involved_token_account_ids)s::TEXT[]" in TRADE_SWAP.filters.condition()


def test_every_filter_model_field_is_recognised():
    for variant in VARIANTS.values():
        assert sorted(variant.filter_model.model_fields) == sorted(variant.filters.params), variant.name
