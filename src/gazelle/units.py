"""Scale-aware fixed-point values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import (
    ROUND_HALF_UP,
    Context,
    Decimal,
    DecimalException,
    Inexact,
    InvalidOperation,
)

from .errors import DivisionByZero, MalformedNumber

# Wide enough for 10**(18 + 18) divisors and products of two such values.
_CONTEXT = Context(prec=120, rounding=ROUND_HALF_UP)

# Parsing must be exact; anything the context would round is rejected.
_EXACT_CONTEXT = _CONTEXT.copy()
_EXACT_CONTEXT.traps[Inexact] = True

# Quotients are carried at this many fractional digits.
DIVISION_SCALE = 40

# Oracle prices and rates are fixed at this precision when leaving float.
FLOAT_BOUNDARY_SCALE = 3

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


@dataclass(frozen=True, eq=False)
class DecimalValue:
    """Exact decimal number carrying an explicit display scale.

    ``amount`` holds the full-precision value. ``scale`` is the number of
    fractional digits the value is displayed at; it only changes the value
    itself when ``rescale`` is called.
    """

    amount: Decimal
    scale: int = 0

    @classmethod
    def of(cls, value: int | str | Decimal, scale: int = 0) -> "DecimalValue":
        """Build a value from an int, a Decimal or a decimal literal."""
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise MalformedNumber(value)
            return cls(value, scale)
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise TypeError(f"Unsupported numeric kind: {type(value).__name__}")
        if isinstance(value, int):
            return cls(Decimal(value), scale)
        return cls.of_integer_string(value, 0).with_scale(scale)

    @classmethod
    def of_integer_string(cls, s: str, decimals: int = 0) -> "DecimalValue":
        """Parse ``s`` and shift it right by ``decimals`` digits.

        Raises:
            MalformedNumber: If ``s`` is not an integer or decimal literal,
                or cannot be shifted by ``decimals`` without rounding.
        """
        if not isinstance(s, str) or not _NUMBER_RE.match(s.strip()):
            raise MalformedNumber(s)
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {decimals}")
        try:
            shifted = Decimal(s.strip()).scaleb(-decimals, _EXACT_CONTEXT)
        except DecimalException as e:
            raise MalformedNumber(s) from e
        return cls(shifted, 0)

    @classmethod
    def from_float(cls, value: float) -> "DecimalValue":
        """Quarantine a float at the boundary by fixing it to 3 digits."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedNumber(value)
        try:
            parsed = Decimal(repr(value))
        except InvalidOperation as e:
            raise MalformedNumber(value) from e
        if not parsed.is_finite():
            raise MalformedNumber(value)
        return cls(parsed, 0).rescale(FLOAT_BOUNDARY_SCALE)

    def rescale(self, new_scale: int, rounding: str = ROUND_HALF_UP) -> "DecimalValue":
        """Round (half away from zero by default) or zero-pad to ``new_scale``."""
        if new_scale < 0:
            raise ValueError(f"scale must be non-negative, got {new_scale}")
        quantum = Decimal(1).scaleb(-new_scale)
        return DecimalValue(
            self.amount.quantize(quantum, rounding=rounding, context=_CONTEXT),
            new_scale,
        )

    def with_scale(self, scale: int) -> "DecimalValue":
        """Change the display scale without touching the amount."""
        return DecimalValue(self.amount, scale)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def _common_scale(self, other: "DecimalValue") -> int:
        return max(self.scale, other.scale)

    def __add__(self, other: object) -> "DecimalValue":
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return DecimalValue(
            _CONTEXT.add(self.amount, other.amount), self._common_scale(other)
        )

    def __sub__(self, other: object) -> "DecimalValue":
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return DecimalValue(
            _CONTEXT.subtract(self.amount, other.amount), self._common_scale(other)
        )

    def __mul__(self, other: object) -> "DecimalValue":
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return DecimalValue(
            _CONTEXT.multiply(self.amount, other.amount), self._common_scale(other)
        )

    def __truediv__(self, other: object) -> "DecimalValue":
        if not isinstance(other, DecimalValue):
            return NotImplemented
        if other.is_zero():
            raise DivisionByZero(f"Cannot divide {self} by zero")
        quotient = _CONTEXT.divide(self.amount, other.amount)
        if quotient.as_tuple().exponent < -DIVISION_SCALE:  # type: ignore[operator]
            quotient = quotient.quantize(
                Decimal(1).scaleb(-DIVISION_SCALE), context=_CONTEXT
            )
        return DecimalValue(quotient, self._common_scale(other))

    def __neg__(self) -> "DecimalValue":
        return DecimalValue(-self.amount, self.scale)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.amount == other.amount

    def __hash__(self) -> int:
        return hash(self.amount)

    def __lt__(self, other: "DecimalValue") -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.amount < other.amount

    def __le__(self, other: "DecimalValue") -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.amount <= other.amount

    def __gt__(self, other: "DecimalValue") -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.amount > other.amount

    def __ge__(self, other: "DecimalValue") -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.amount >= other.amount

    def __str__(self) -> str:
        return str(self.rescale(self.scale).amount)

    def __repr__(self) -> str:
        return f"DecimalValue({str(self.amount)!r}, scale={self.scale})"

    def to_decimal(self) -> Decimal:
        """Return the value rounded to its display scale."""
        return self.rescale(self.scale).amount


ZERO = DecimalValue(Decimal(0))
HUNDRED = DecimalValue(Decimal(100))
