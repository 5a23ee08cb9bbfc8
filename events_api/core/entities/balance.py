"""
Balance codec for arbitrary precision token amounts.

Amounts travel as canonical decimal strings and never pass through a float.
The same codec serves the three cardinalities found on event records:
a required amount, an optional amount (string or null) and a list of amounts.
"""
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BeforeValidator, PlainSerializer

from events_api.core.errors import BalanceDecodeError


class Cardinality(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"


def encode_balance(value: Decimal) -> str:
    # 'f' keeps the scale and never switches to exponent notation
    return format(value, "f")


def decode_balance(raw: Any) -> Decimal:
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, bool) or isinstance(raw, float):
        raise BalanceDecodeError(f"Balance must be a decimal string, got {type(raw).__name__}")
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, str):
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            raise BalanceDecodeError(f"Invalid balance: {raw!r}") from None
    else:
        raise BalanceDecodeError(f"Unsupported balance type: {type(raw).__name__}")

    if not value.is_finite():
        raise BalanceDecodeError(f"Balance must be finite, got {raw!r}")
    return value


class BalanceCodec:
    """
    Encodes and decodes amounts for one cardinality.

    Decoding a sequence fails as a whole if any element is invalid.
    """

    def __init__(self, cardinality: Cardinality):
        self.cardinality = cardinality

    def encode(self, value):
        if self.cardinality is Cardinality.OPTIONAL:
            return None if value is None else encode_balance(value)
        if self.cardinality is Cardinality.SEQUENCE:
            return [encode_balance(v) for v in value]
        return encode_balance(value)

    def decode(self, raw):
        if self.cardinality is Cardinality.OPTIONAL:
            return None if raw is None else decode_balance(raw)
        if self.cardinality is Cardinality.SEQUENCE:
            if not isinstance(raw, (list, tuple)):
                raise BalanceDecodeError(f"Expected a list of balances, got {type(raw).__name__}")
            return [decode_balance(v) for v in raw]
        if raw is None:
            raise BalanceDecodeError("Balance is required")
        return decode_balance(raw)


def _balance_field(cardinality: Cardinality, python_type, wire_type):
    codec = BalanceCodec(cardinality)
    return Annotated[
        python_type,
        BeforeValidator(codec.decode),
        PlainSerializer(codec.encode, return_type=wire_type),
    ]


# Pydantic field types
Balance = _balance_field(Cardinality.REQUIRED, Decimal, str)
OptionalBalance = _balance_field(Cardinality.OPTIONAL, Optional[Decimal], Optional[str])
VecBalance = _balance_field(Cardinality.SEQUENCE, List[Decimal], List[str])
