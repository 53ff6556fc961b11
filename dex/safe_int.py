"""Checked integer arithmetic for reserve and share math.

Python ints never wrap, but pool math must still refuse results that make no
sense for token amounts. SafeInt makes every step explicit:
- Subtraction below zero raises Underflow
- Division by zero raises DivisionByZero
- Values wider than the storage slot raise UintOverflow on to_uint()

Usage pattern:
    from dex.safe_int import S

    def shares_for(amount: int, total: int, reserve: int) -> int:
        return (S(amount) * S(total) // S(reserve)).value
"""

from __future__ import annotations

from math import isqrt

UINT112_MAX = 2**112 - 1
UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative amount."""

    pass


class UintOverflow(SafeIntError):
    """Value does not fit in the requested unsigned width."""

    pass


class SafeInt:
    """Non-negative integer amount with checked operators.

    Attributes:
        value: The wrapped integer (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract, raising Underflow instead of going negative."""
        other_val = _unwrap(other)
        if other_val > self._value:
            raise Underflow(f"Underflow: {self._value} - {other_val}")
        return SafeInt(self._value - other_val)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division, raising DivisionByZero on a zero divisor."""
        other_val = _unwrap(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __lshift__(self, bits: int) -> SafeInt:
        return SafeInt(self._value << bits)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _unwrap(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _unwrap(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _unwrap(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _unwrap(other)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounding up.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _unwrap(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def isqrt(self) -> SafeInt:
        """Floor of the square root."""
        if self._value < 0:
            raise Underflow(f"Square root of negative value: {self._value}")
        return SafeInt(isqrt(self._value))

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _unwrap(other)))

    def to_uint(self, bits: int = 256) -> int:
        """Return the value after checking it fits in an unsigned `bits`-wide slot.

        Raises:
            UintOverflow: If the value is negative or too wide
        """
        if self._value < 0 or self._value >= 1 << bits:
            raise UintOverflow(f"Value does not fit in uint{bits}: {self._value}")
        return self._value

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)


def _unwrap(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


# Short alias used in math-heavy code
S = SafeInt
