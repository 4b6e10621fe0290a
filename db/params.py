"""
db/params.py
------------
Tagged bind values and the request-scoped parameter builder.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping, Optional


class BindType(Enum):
    """Type a value is bound to the statement with."""
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    STRING = "string"


def infer_bind_type(value: Any) -> BindType:
    """
    Derive the bind type from a value's runtime type.

    Precedence is integer, boolean, null, then string. ``bool`` is a
    subclass of ``int`` in Python, so it is checked first.
    """
    if isinstance(value, bool):
        return BindType.BOOLEAN
    if isinstance(value, int):
        return BindType.INTEGER
    if value is None:
        return BindType.NULL
    return BindType.STRING


@dataclass(frozen=True)
class BoundValue:
    """A value together with the type it is sent as."""
    value: Any
    type: BindType

    @classmethod
    def of(cls, value: Any) -> "BoundValue":
        return cls(value, infer_bind_type(value))

    def adapted(self) -> Any:
        """
        The Python object handed to the driver for this bind type.

        STRING turns plain numbers into text; str, bytes, dates, Decimal,
        lists and dicts go through unchanged for psycopg2 to adapt.
        """
        if self.type is BindType.NULL:
            return None
        if self.type is BindType.BOOLEAN:
            return bool(self.value)
        if self.type is BindType.INTEGER:
            return int(self.value)
        if isinstance(self.value, (int, float)):
            return str(self.value)
        return self.value


class Params:
    """
    Ordered batch of named statement parameters.

    Binding a name twice keeps the last value.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, BoundValue] = {}
        if values:
            self.bind_more(values)

    def bind(self, name: str, value: Any, bind_type: Optional[BindType] = None) -> "Params":
        """Add one parameter; an explicit `bind_type` skips inference."""
        bound = BoundValue(value, bind_type) if bind_type else BoundValue.of(value)
        self._values[name] = bound
        return self

    def bind_more(self, values: "Optional[Mapping[str, Any] | Params]") -> "Params":
        """Add several parameters. Ignored when the batch already has entries."""
        if self._values or not values:
            return self
        if isinstance(values, Params):
            self._values.update(values._values)
        else:
            for name, value in values.items():
                self.bind(name, value)
        return self

    def clear(self) -> None:
        self._values.clear()

    def items(self) -> Iterator[tuple[str, BoundValue]]:
        return iter(self._values.items())

    def as_dict(self) -> dict[str, Any]:
        """Adapted values keyed by placeholder name, ready for ``cursor.execute``."""
        return {name: bound.adapted() for name, bound in self._values.items()}

    def __len__(self) -> int:
        return len(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> BoundValue:
        return self._values[name]

    def __repr__(self) -> str:
        return f"Params({self._values!r})"
