# -*- coding: utf-8 -*-
"""
stakerewards.fixedpoint
=======================

Checked unsigned-integer helpers and a small scaled-integer type for the
reward accumulator.

Conventions
-----------
- All operations are **integer-only**; floats never enter the accounting path.
- Every value must stay within ``[0, U256_MAX]``. Leaving that envelope raises
  :class:`~stakerewards.errors.ArithmeticOverflow` instead of wrapping.
- Products are formed before quotients (``mul_div_down``) and division
  truncates toward zero. The rounding loss ("dust") is accepted.

Examples
--------
    from stakerewards.fixedpoint import SCALE, mul_div_down, FixedPoint

    # 40 seconds at 1 token/s spread over 400 staked units, in 1e18 units
    rpu = mul_div_down(40 * 1, SCALE, 400)      # 10**17

    FixedPoint(rpu).mul_int(100)                # 10
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .errors import ArithmeticOverflow, ArithmeticUnderflow, DivisionByZero


# ---------------------------------------------------------------------------
# Numeric envelopes & constants
# ---------------------------------------------------------------------------

U256_MAX: Final[int] = (1 << 256) - 1
SCALE: Final[int] = 10**18  # 1e18 fixed-point


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def require_u256(*xs: int) -> None:
    """Raise if any value is outside [0, U256_MAX]."""
    for n in xs:
        if n < 0 or n > U256_MAX:
            raise ArithmeticOverflow("value outside u256 range", details={"value": n})


# ---------------------------------------------------------------------------
# Checked (fail-fast on errors)
# ---------------------------------------------------------------------------


def checked_add(x: int, y: int) -> int:
    """Checked add: raise on overflow."""
    require_u256(x, y)
    s = x + y
    if s > U256_MAX:
        raise ArithmeticOverflow("addition overflow", details={"x": x, "y": y})
    return s


def checked_sub(x: int, y: int) -> int:
    """Checked sub: raise on underflow (y > x)."""
    require_u256(x, y)
    if y > x:
        raise ArithmeticUnderflow("subtraction underflow", details={"x": x, "y": y})
    return x - y


def checked_mul(x: int, y: int) -> int:
    """Checked multiply: raise on overflow."""
    require_u256(x, y)
    p = x * y
    if p > U256_MAX:
        raise ArithmeticOverflow("multiplication overflow", details={"x": x, "y": y})
    return p


def checked_div(x: int, y: int) -> int:
    """Checked divide (floor): raise on div-by-zero."""
    require_u256(x, y)
    if y == 0:
        raise DivisionByZero("division by zero", details={"x": x})
    return x // y


def mul_div_down(x: int, y: int, d: int) -> int:
    """
    floor((x*y)/d) where the intermediate product must itself fit in U256.

    The product is checked rather than widened so the accumulator fails the
    same way an on-chain implementation would when rates are unbounded.
    """
    return checked_div(checked_mul(x, y), d)


# ---------------------------------------------------------------------------
# Scaled integer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class FixedPoint:
    """
    Immutable fixed-point number stored as ``raw`` units of ``1/SCALE``.

    Only the operations the pool needs are provided; all of them are checked.
    """

    raw: int = 0

    def __post_init__(self) -> None:
        require_u256(self.raw)

    @classmethod
    def from_int(cls, n: int) -> "FixedPoint":
        return cls(checked_mul(n, SCALE))

    @classmethod
    def from_ratio(cls, num: int, den: int) -> "FixedPoint":
        """Truncating ``num / den`` with SCALE precision."""
        return cls(mul_div_down(num, SCALE, den))

    def __add__(self, other: "FixedPoint") -> "FixedPoint":
        return FixedPoint(checked_add(self.raw, other.raw))

    def __sub__(self, other: "FixedPoint") -> "FixedPoint":
        return FixedPoint(checked_sub(self.raw, other.raw))

    def mul_int(self, n: int) -> int:
        """Integer part of ``self * n`` (truncating)."""
        return mul_div_down(self.raw, n, SCALE)

    def to_decimal_str(self, places: int = 18) -> str:
        whole, frac = divmod(self.raw, SCALE)
        if places <= 0:
            return str(whole)
        digits = str(frac).rjust(18, "0")[:places].rstrip("0")
        return f"{whole}.{digits}" if digits else str(whole)

    def __int__(self) -> int:
        return self.raw // SCALE


__all__ = [
    "U256_MAX",
    "SCALE",
    "require_u256",
    "checked_add",
    "checked_sub",
    "checked_mul",
    "checked_div",
    "mul_div_down",
    "FixedPoint",
]
