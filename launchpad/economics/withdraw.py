from __future__ import annotations
"""
Withdrawal workflow.

- FixedPrice: all-or-nothing. The requested amount must equal the full
  principal; the position is zeroed (claimed is kept) and its weight leaves
  `total_sold_tokens`.
- PriceDiscovery: partial withdrawals. The weight of what remains is
  recomputed with the discount active *now*; the position only ever loses
  weight, so a withdrawal can never raise anyone's allocation.

`total_sold_tokens` is floored at zero in both branches.
"""


from dataclasses import dataclass
from typing import Sequence

from ..errors import InvalidAmount
from .discount import Discount, apply_discount
from .mechanics import Investment, Mechanic, is_fixed_price
from .scaling import saturating_sub


@dataclass(frozen=True)
class WithdrawOutcome:
    investment: Investment
    total_deposited: int
    total_sold_tokens: int
    withdrawn: int
    weight_removed: int


def withdraw_outcome(
    mechanic: Mechanic,
    discounts: Sequence[Discount],
    investment: Investment,
    total_deposited: int,
    total_sold_tokens: int,
    amount: int,
    t: int,
) -> WithdrawOutcome:
    if amount <= 0:
        raise InvalidAmount("withdraw amount must be positive", amount=amount)

    if is_fixed_price(mechanic):
        if amount != investment.amount:
            raise InvalidAmount(
                "fixed-price withdrawals must take the full amount",
                amount=amount,
                details={"available": investment.amount},
            )
        return WithdrawOutcome(
            investment=investment.with_changes(amount=0, weight=0),
            total_deposited=saturating_sub(total_deposited, amount),
            total_sold_tokens=saturating_sub(total_sold_tokens, investment.weight),
            withdrawn=amount,
            weight_removed=investment.weight,
        )

    if amount > investment.amount:
        raise InvalidAmount(
            "withdraw amount exceeds the deposited amount",
            amount=amount,
            details={"available": investment.amount},
        )

    new_amount = investment.amount - amount
    recalculated = apply_discount(discounts, new_amount, t)
    if recalculated < investment.weight:
        removed = investment.weight - recalculated
        new_weight = recalculated
    else:
        removed = 0
        new_weight = investment.weight

    return WithdrawOutcome(
        investment=investment.with_changes(amount=new_amount, weight=new_weight),
        total_deposited=saturating_sub(total_deposited, amount),
        total_sold_tokens=saturating_sub(total_sold_tokens, removed),
        withdrawn=amount,
        weight_removed=removed,
    )


__all__ = ["WithdrawOutcome", "withdraw_outcome"]
