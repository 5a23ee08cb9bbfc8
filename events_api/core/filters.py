"""
Optional per-field filters and their composition into one predicate.

Every field renders to a tri-state SQL condition that is true when the
parameter is NULL, so a single statement per event table covers every
combination of supplied filters. The same fields evaluate rows in Python for
the in-memory store, keeping both stores on identical semantics.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


def parse_candidates(raw: Optional[str]) -> Optional[List[str]]:
    """Splits a comma separated id list. Blank entries are dropped; nothing left means no filter."""
    if raw is None:
        return None
    candidates = [part.strip() for part in raw.split(",") if part.strip()]
    return candidates or None


class FilterField:
    def __init__(self, param: str):
        self.param = param

    def bind(self, raw: Optional[str]) -> Any:
        return raw

    def sql(self) -> str:
        raise NotImplementedError

    def matches(self, row: Mapping[str, Any], value: Any) -> bool:
        raise NotImplementedError


class Equals(FilterField):
    """Exact match of one column against one value."""

    def __init__(self, param: str, column: Optional[str] = None):
        super().__init__(param)
        self.column = column or param

    def sql(self) -> str:
        return f"(%({self.param})s::TEXT IS NULL OR {self.column} = %({self.param})s)"

    def matches(self, row, value):
        return value is None or row.get(self.column) == value


class AnyOf(FilterField):
    """Any of the listed columns equals any of the candidate ids."""

    def __init__(self, param: str, columns: Sequence[str]):
        super().__init__(param)
        self.columns = tuple(columns)

    def bind(self, raw):
        return parse_candidates(raw)

    def sql(self) -> str:
        array = ", ".join(self.columns)
        return f"(%({self.param})s::TEXT[] IS NULL OR ARRAY[{array}] && %({self.param})s::TEXT[])"

    def matches(self, row, value):
        if value is None:
            return True
        return any(row.get(column) in value for column in self.columns)


class HasAnyKey(FilterField):
    """A JSONB column has any of the candidate ids as a top level key or array element."""

    def __init__(self, param: str, column: str):
        super().__init__(param)
        self.column = column

    def bind(self, raw):
        return parse_candidates(raw)

    def sql(self) -> str:
        return f"(%({self.param})s::TEXT[] IS NULL OR {self.column} ?| %({self.param})s::TEXT[])"

    def matches(self, row, value):
        if value is None:
            return True
        # Same reach as jsonb ?|: object keys, string elements of a top level
        # array, or a top level string
        payload = row.get(self.column)
        if isinstance(payload, dict):
            present = set(payload)
        elif isinstance(payload, list):
            present = {item for item in payload if isinstance(item, str)}
        elif isinstance(payload, str):
            present = {payload}
        else:
            return False
        return any(candidate in present for candidate in value)


class FilterSpec:
    """
    The optional filter fields recognised by one event table, combined with AND.
    """

    def __init__(self, *fields: FilterField):
        self.fields: Tuple[FilterField, ...] = fields

    @property
    def params(self) -> List[str]:
        return [f.param for f in self.fields]

    def condition(self) -> str:
        if not self.fields:
            return "TRUE"
        return "\n    AND ".join(f.sql() for f in self.fields)

    def bind(self, values: Mapping[str, Optional[str]]) -> Dict[str, Any]:
        # Unrecognised names are ignored, like any unknown query parameter
        return {f.param: f.bind(values.get(f.param)) for f in self.fields}

    def matches(self, row: Mapping[str, Any], bound: Mapping[str, Any]) -> bool:
        return all(f.matches(row, bound.get(f.param)) for f in self.fields)
