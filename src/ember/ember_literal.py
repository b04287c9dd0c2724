"""
Scalar value model for the EMBER language.

A `Literal` is one of five variants:

    STRING   text
    INTEGER  signed 32-bit int
    FLOAT    64-bit float
    BOOLEAN  True / False
    NONE     absence of a value

Every variant projects to a string, a float and a bool, and those
projections never raise. Arithmetic is float-only: operands are coerced with
`into_float()` and the result is always a Python float, so `2 - 1` on two
integer literals gives `1.0`. Ordering compares the float projections and is
partial: anything compared with NaN is unordered.

Example:
    >>> Literal.integer(2) - Literal.integer(1)
    1.0
    >>> Literal.string("").into_bool()
    True
    >>> Literal.none().partial_cmp(Literal.integer(0)) is None
    True
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from ember.ember_constants import INT_MAX, INT_MIN

STRING = "STRING"
INTEGER = "INTEGER"
FLOAT = "FLOAT"
BOOLEAN = "BOOLEAN"
NONE = "NONE"

LITERAL_KINDS = (STRING, INTEGER, FLOAT, BOOLEAN, NONE)


def format_float(value: float) -> str:
    """Shortest decimal form of a float, never in exponent notation.

    Integral values drop the fractional part (`1.0` -> `"1"`, `-0.0` -> `"-0"`).
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return format(Decimal(repr(value)).normalize(), "f")


def parse_float(text: str) -> float:
    """Strict float parse; anything that is not a plain numeric literal is NaN.

    ASCII only: `float()` would also read other Unicode digits and spaces.
    """
    if not text or not text.isascii() or text != text.strip() or "_" in text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def _divide(lhs: float, rhs: float) -> float:
    if rhs != 0.0:
        return lhs / rhs
    if lhs == 0.0 or math.isnan(lhs):
        return math.nan
    sign = math.copysign(1.0, lhs) * math.copysign(1.0, rhs)
    return math.copysign(math.inf, sign)


class Literal:
    """A tagged scalar value.

    Build instances through the named constructors rather than `__init__`:

        Literal.string("hi"), Literal.integer(3), Literal.float_(0.5),
        Literal.boolean(True), Literal.none()

    Attributes:
        kind (str): One of STRING, INTEGER, FLOAT, BOOLEAN, NONE.
        value (str | int | float | bool | None): The payload for that kind.
    """

    __slots__ = ("kind", "value")

    def __init__(self, kind: str, value: Any = None) -> None:
        if kind not in LITERAL_KINDS:
            raise ValueError(f"unknown literal kind: {kind!r}")
        self.kind = kind
        self.value = value

    @classmethod
    def string(cls, text: str) -> Literal:
        return cls(STRING, str(text))

    @classmethod
    def integer(cls, value: int) -> Literal:
        """Builds an INTEGER literal.

        Raises:
            TypeError: If `value` is not an int (bools included).
            ValueError: If `value` is outside the signed 32-bit range.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"integer literal needs an int, got {type(value).__name__}")
        if not INT_MIN <= value <= INT_MAX:
            raise ValueError(f"integer {value} is out of range")
        return cls(INTEGER, value)

    @classmethod
    def float_(cls, value: float) -> Literal:
        return cls(FLOAT, float(value))

    @classmethod
    def boolean(cls, value: bool) -> Literal:
        return cls(BOOLEAN, bool(value))

    @classmethod
    def none(cls) -> Literal:
        return cls(NONE)

    # Coercions

    def into_string(self) -> str:
        """Textual form of the value.

        Returns:
            str: "true"/"false" for booleans, "None" for NONE, decimal text
            for numbers (see `format_float`), the text itself for strings.
        """
        if self.kind == BOOLEAN:
            return "true" if self.value else "false"
        if self.kind == NONE:
            return "None"
        if self.kind == FLOAT:
            return format_float(self.value)
        if self.kind == INTEGER:
            return str(self.value)
        return self.value

    def into_float(self) -> float:
        """Numeric form of the value; never raises.

        Returns:
            float: 1.0/0.0 for booleans, NaN for NONE and for strings that
            do not parse, the widened value for integers.
        """
        if self.kind == BOOLEAN:
            return 1.0 if self.value else 0.0
        if self.kind == NONE:
            return math.nan
        if self.kind == FLOAT:
            return self.value
        if self.kind == INTEGER:
            return float(self.value)
        return parse_float(self.value)

    def into_bool(self) -> bool:
        """Truthiness: NONE, integer zero and NaN are false, everything else true."""
        if self.kind == BOOLEAN:
            return self.value
        if self.kind == NONE:
            return False
        if self.kind == FLOAT:
            return not math.isnan(self.value)
        if self.kind == INTEGER:
            return self.value != 0
        # strings are never falsy, the empty string included
        return True

    # Float-coerced arithmetic

    def logical_not(self) -> bool:
        """Negated `into_bool()`."""
        return not self.into_bool()

    def __neg__(self) -> float:
        return -self.into_float()

    def __sub__(self, other: Literal) -> float:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.into_float() - other.into_float()

    def __mul__(self, other: Literal) -> float:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.into_float() * other.into_float()

    def __truediv__(self, other: Literal) -> float:
        if not isinstance(other, Literal):
            return NotImplemented
        return _divide(self.into_float(), other.into_float())

    # Partial ordering

    def partial_cmp(self, other: Literal) -> int | None:
        """Compare float projections: -1, 0 or 1, or None when unordered."""
        lhs, rhs = self.into_float(), other.into_float()
        if math.isnan(lhs) or math.isnan(rhs):
            return None
        return (lhs > rhs) - (lhs < rhs)

    def __lt__(self, other: Literal) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.into_float() < other.into_float()

    def __le__(self, other: Literal) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.into_float() <= other.into_float()

    def __gt__(self, other: Literal) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.into_float() > other.into_float()

    def __ge__(self, other: Literal) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.into_float() >= other.into_float()

    # Structural equality, as a value type

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Literal)
            and self.kind == other.kind
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value))

    def __str__(self) -> str:
        return self.into_string()

    def __repr__(self) -> str:
        if self.kind == NONE:
            return "Literal(NONE)"
        return f"Literal({self.kind}, {self.value!r})"


__all__ = [
    "BOOLEAN",
    "FLOAT",
    "INTEGER",
    "Literal",
    "NONE",
    "STRING",
    "format_float",
    "parse_float",
]
