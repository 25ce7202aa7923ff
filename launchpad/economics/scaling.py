from __future__ import annotations

"""
Integer scaling primitives shared by every launchpad workflow.

All token quantities are unsigned 128-bit integers. Products are formed in an
unsigned 256-bit envelope and the truncated quotient must fit back into 128
bits; anything else raises `ArithmeticOverflow`. No floating point is used.

Properties relied upon by the deposit and discount code
-------------------------------------------------------
For x >= 0 and num, den > 0:

- scale(x, num, den) is non-decreasing in x
- num >= den      =>  scale(x, num, den) >= x
- num >= 2 * den  =>  scale(x, num, den) >  x          (x > 0)
- den > num       =>  scale(x, num, den) <  x          (x > 0)
- revert(scale(x, num, den), num, den) <= x            (round trip never creates value)

Examples
--------
>>> scale(210_000, 1, 2)
105000
>>> revert(15_000, 1, 2)
30000
"""


from typing import Final

from ..errors import ArithmeticOverflow, DivisionByZero

U128_MAX: Final[int] = (1 << 128) - 1
U256_MAX: Final[int] = (1 << 256) - 1

BPS_DEN: Final[int] = 10_000  # basis points denominator


def require_u128(name: str, x: int) -> int:
    """Return `x` if it is an int inside [0, U128_MAX], else raise."""
    if isinstance(x, bool) or not isinstance(x, int):
        raise TypeError(f"{name} must be int, got {type(x)!r}")
    if x < 0 or x > U128_MAX:
        raise ArithmeticOverflow(f"{name} outside the u128 range", details={name: x})
    return x


def mul_div_down(x: int, num: int, den: int) -> int:
    """floor((x * num) / den) with u256 product and u128 result checks."""
    require_u128("x", x)
    require_u128("num", num)
    require_u128("den", den)
    if den == 0:
        raise DivisionByZero("denominator must be positive")
    prod = x * num
    if prod > U256_MAX:  # pragma: no cover - u128 * u128 always fits
        raise ArithmeticOverflow("product outside the u256 range")
    q = prod // den
    if q > U128_MAX:
        raise ArithmeticOverflow(
            "result outside the u128 range", details={"x": x, "num": num, "den": den}
        )
    return q


def scale(x: int, num: int, den: int) -> int:
    """Multiply `x` by the rational num/den, truncating toward zero."""
    return mul_div_down(x, num, den)


def revert(x: int, num: int, den: int) -> int:
    """Undo `scale(., num, den)`; never returns more than the pre-image."""
    return mul_div_down(x, den, num)


def saturating_sub(a: int, b: int) -> int:
    """a - b floored at zero."""
    return a - b if a > b else 0


def apply_bps(x: int, bps: int) -> int:
    """floor(x * bps / 10_000)."""
    if not (0 <= bps <= BPS_DEN):
        raise ArithmeticOverflow("basis points must be within [0, 10000]", details={"bps": bps})
    return mul_div_down(x, bps, BPS_DEN)


__all__ = [
    "U128_MAX",
    "U256_MAX",
    "BPS_DEN",
    "require_u128",
    "mul_div_down",
    "scale",
    "revert",
    "saturating_sub",
    "apply_bps",
]
