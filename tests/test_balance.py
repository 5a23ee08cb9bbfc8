from decimal import Decimal

import pytest
from pydantic import BaseModel, ValidationError

from events_api.core.entities.balance import (
    Balance,
    BalanceCodec,
    Cardinality,
    OptionalBalance,
    VecBalance,
    decode_balance,
    encode_balance,
)
from events_api.core.errors import BalanceDecodeError, EventsApiError


class Amounts(BaseModel):
    amount: Balance
    fee: OptionalBalance = None
    prices: VecBalance = []


@pytest.mark.parametrize("text", [
    "0",
    "1000000000000000000000000",
    "340282366920938463463374607431768211455",
    "0.000000000000000000000001",
    "12.500",
])
def test_decode_then_encode_keeps_string(text):
    assert encode_balance(decode_balance(text)) == text


def test_encode_never_uses_exponent():
    assert encode_balance(Decimal("1E+30")) == "1" + "0" * 30
    assert encode_balance(Decimal("1E-7")) == "0.0000001"


@pytest.mark.parametrize("raw", [1.5, True, "abc", "", "NaN", "Infinity", None, object()])
def test_decode_rejects_non_decimal_values(raw):
    with pytest.raises(BalanceDecodeError):
        BalanceCodec(Cardinality.REQUIRED).decode(raw)


def test_optional_codec_maps_none_to_null():
    codec = BalanceCodec(Cardinality.OPTIONAL)
    assert codec.encode(None) is None
    assert codec.decode(None) is None
    assert codec.decode("5") == Decimal("5")


def test_sequence_codec_fails_on_any_bad_element():
    codec = BalanceCodec(Cardinality.SEQUENCE)
    assert codec.encode([Decimal("1"), Decimal("2.50")]) == ["1", "2.50"]
    with pytest.raises(BalanceDecodeError):
        codec.decode(["1", "oops", "3"])


def test_model_fields_serialise_as_strings():
    amounts = Amounts(amount=Decimal("10.01"), fee=None, prices=[Decimal("1"), "2"])
    assert amounts.model_dump(mode="json") == {"amount": "10.01", "fee": None, "prices": ["1", "2"]}


def test_model_rejects_float_amount():
    with pytest.raises(ValidationError):
        Amounts(amount=0.1)


def test_decode_error_is_an_api_error_and_a_value_error():
    assert issubclass(BalanceDecodeError, EventsApiError)
    assert issubclass(BalanceDecodeError, ValueError)
