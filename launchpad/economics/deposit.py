from __future__ import annotations
"""
Deposit workflow: turn a positive deposit into weight, enforcing the hard cap.

PriceDiscovery
--------------
    weight = apply_discount(amount, t)
The deposit is always accepted in full; there is no cap.

FixedPrice(deposit_unit, sale_unit)
-----------------------------------
    weight = apply_discount(amount, t)
    assets = weight * sale_unit // deposit_unit

If `total_sold + assets` stays within `sale_amount` the deposit is accepted
whole. Otherwise only the part that fits is taken:

    excess       = total_sold + assets - sale_amount
    remain       = excess * deposit_unit // sale_unit
    refund       = revert_discount(remain, t)
    accepted     = amount - refund
    weight_added = sale_amount - total_sold

and `total_sold` lands exactly on the cap. A deposit arriving when the cap is
already reached is refunded in full. Every conversion truncates, so the refund
can only err in the sale's favor and never exceeds the deposit.

Example
-------
>>> from launchpad.economics.mechanics import FixedPrice
>>> out = deposit_outcome(FixedPrice(1, 1), (), 200_000, Investment(), 0, 0, 210_000, 0)
>>> (out.accepted, out.refund, out.total_sold_tokens)
(200000, 10000, 200000)
"""


from dataclasses import dataclass
from typing import Sequence

from ..errors import InvalidAmount, InvariantViolation
from .discount import Discount, apply_discount, revert_discount
from .mechanics import FixedPrice, Investment, Mechanic


@dataclass(frozen=True)
class DepositOutcome:
    investment: Investment
    total_deposited: int
    total_sold_tokens: int
    accepted: int
    weight_added: int
    refund: int


def deposit_outcome(
    mechanic: Mechanic,
    discounts: Sequence[Discount],
    sale_amount: int,
    investment: Investment,
    total_deposited: int,
    total_sold_tokens: int,
    amount: int,
    t: int,
) -> DepositOutcome:
    """Apply a deposit of `amount` at `t` to one investment and the sale totals."""
    if amount <= 0:
        raise InvalidAmount("deposit amount must be positive", amount=amount)

    if isinstance(mechanic, FixedPrice):
        accepted, weight_added, refund = _fixed_price(
            mechanic, discounts, sale_amount, total_sold_tokens, amount, t
        )
    else:
        accepted, weight_added, refund = amount, apply_discount(discounts, amount, t), 0

    if refund > amount or accepted + refund != amount:
        raise InvariantViolation(
            "refund exceeds the deposit",
            details={"amount": amount, "refund": refund, "accepted": accepted},
        )

    return DepositOutcome(
        investment=investment.with_changes(
            amount=investment.amount + accepted,
            weight=investment.weight + weight_added,
        ),
        total_deposited=total_deposited + accepted,
        total_sold_tokens=total_sold_tokens + weight_added,
        accepted=accepted,
        weight_added=weight_added,
        refund=refund,
    )


def _fixed_price(
    mechanic: FixedPrice,
    discounts: Sequence[Discount],
    sale_amount: int,
    total_sold: int,
    amount: int,
    t: int,
):
    if total_sold >= sale_amount:
        return 0, 0, amount

    weight = apply_discount(discounts, amount, t)
    assets = mechanic.to_sale_tokens(weight)
    if total_sold + assets <= sale_amount:
        return amount, assets, 0

    excess = total_sold + assets - sale_amount
    remain = mechanic.to_deposit_units(excess)
    refund = revert_discount(discounts, remain, t)
    if refund > amount:
        raise InvariantViolation(
            "refund exceeds the deposit",
            details={"amount": amount, "refund": refund, "excess": excess},
        )
    return amount - refund, sale_amount - total_sold, refund


__all__ = ["DepositOutcome", "deposit_outcome"]
