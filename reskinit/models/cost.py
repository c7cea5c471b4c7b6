"""
Cost vectors for card definitions.

A cost vector is the price of a card: a fixed mapping from each of the five
token colors to a non-negative integer amount. Storage keeps it as a compact
JSON object; everything above the storage boundary sees a CostVector.

INVARIANT: A decoded vector always carries exactly the five colors.
Decoding never raises. Anything it cannot read becomes 0.
"""

import json
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any


class Color(str, Enum):
    """Token colors, in canonical order."""

    WHITE = "WHITE"
    BLUE = "BLUE"
    GREEN = "GREEN"
    RED = "RED"
    BLACK = "BLACK"


_COLOR_INDEX = {color: index for index, color in enumerate(Color)}


class CostVector(Mapping[Color, int]):
    """
    Immutable five-color cost.

    Behaves as a read-only mapping keyed by Color. Equality compares the
    amounts of all five colors, so vectors built from different inputs
    compare equal when they price a card the same way.
    """

    __slots__ = ("_amounts",)

    def __init__(self, amounts: Mapping[Color, int] | None = None) -> None:
        given = amounts or {}
        self._amounts: tuple[int, ...] = tuple(given.get(color, 0) for color in Color)
        if any(amount < 0 for amount in self._amounts):
            raise ValueError("Cost amounts must be non-negative")

    def __getitem__(self, color: Color) -> int:
        try:
            return self._amounts[_COLOR_INDEX[Color(color)]]
        except ValueError:
            raise KeyError(color) from None

    def __iter__(self) -> Iterator[Color]:
        return iter(Color)

    def __len__(self) -> int:
        return len(self._amounts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CostVector):
            return self._amounts == other._amounts
        if isinstance(other, Mapping):
            return len(other) == len(self) and all(other.get(c) == a for c, a in self.items())
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._amounts)

    def __repr__(self) -> str:
        parts = ", ".join(f"{c.value}={a}" for c, a in zip(Color, self._amounts, strict=True))
        return f"CostVector({parts})"

    def total(self) -> int:
        """Total number of tokens needed to pay this cost."""
        return sum(self._amounts)

    def to_dict(self) -> dict[str, int]:
        """Plain dict keyed by color name, in canonical order."""
        return {color.value: amount for color, amount in zip(Color, self._amounts, strict=True)}


ZERO_COST = CostVector()


def _coerce_amount(value: Any) -> int:
    # bool is an int subclass; treat it as garbage
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if value >= 0 else 0
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    return 0


def _from_mapping(raw: Mapping[Any, Any]) -> CostVector:
    amounts: dict[Color, int] = {}
    for key, value in raw.items():
        name = key.value if isinstance(key, Color) else key
        if not isinstance(name, str):
            continue
        try:
            color = Color(name.upper())
        except ValueError:
            continue
        amounts[color] = _coerce_amount(value)
    return CostVector(amounts)


def encode(vector: Mapping[Color, int] | Mapping[str, int]) -> str:
    """
    Serialize a cost vector to its canonical stored form.

    The result is a compact JSON object with all five colors in canonical
    order, e.g. {"WHITE":0,"BLUE":2,"GREEN":0,"RED":1,"BLACK":0}.

    Raises:
        ValueError: If an amount is negative or not an integer
    """
    amounts: dict[str, int] = {}
    for color in Color:
        value = vector.get(color, 0)  # type: ignore[call-overload]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"Invalid amount for {color.value}: {value!r}")
        amounts[color.value] = value
    return json.dumps(amounts, separators=(",", ":"))


def decode(raw: str | bytes | Mapping[Any, Any] | None) -> CostVector:
    """
    Parse a stored cost into a CostVector.

    Accepts the stored JSON text or an in-memory mapping that has not been
    serialized yet. Malformed input yields the all-zero vector.
    """
    if isinstance(raw, CostVector):
        return raw
    if isinstance(raw, Mapping):
        return _from_mapping(raw)
    if isinstance(raw, (str, bytes)):
        try:
            parsed = json.loads(raw)
        except (ValueError, UnicodeDecodeError, RecursionError):
            return ZERO_COST
        if isinstance(parsed, Mapping):
            return _from_mapping(parsed)
    return ZERO_COST
