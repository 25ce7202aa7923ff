from __future__ import annotations

"""
Allocation and vesting release.

Allocation
----------
- FixedPrice: the recorded weight already is a sale-token quantity.
- PriceDiscovery: a pro-rata share of the sale amount,
      weight * sale_amount // total_sold_tokens
  computed once the sale has closed and `total_sold_tokens` is final.

Release curve
-------------
With an optional vesting schedule anchored at `start` (the TGE if configured,
otherwise the sale end; individual stakeholder schedules always use the sale
end):

    t <  start + cliff            -> instant share only (0 by default)
    t >= start + vesting_period   -> full allocation
    otherwise                     -> instant + linear share of the remainder

The linear share grows from `start` (IMMEDIATE) or from the cliff
(AFTER_CLIFF). The curve is non-decreasing in t and never exceeds the
allocation. Releasable amounts are cumulative; the caller subtracts what was
already claimed.
"""


from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from ..errors import ConfigError, InvariantViolation
from .mechanics import Investment, Mechanic, is_fixed_price
from .scaling import BPS_DEN, apply_bps, saturating_sub, scale

if TYPE_CHECKING:  # pragma: no cover
    from ..config import SaleConfig
    from .distribution import Stakeholder


class VestingScheme(Enum):
    """When the linear part of the release starts to grow."""
    IMMEDIATE = "immediate"      # from the vesting start
    AFTER_CLIFF = "after_cliff"  # from the end of the cliff


@dataclass(frozen=True)
class VestingSchedule:
    """
    Cliff-then-linear release.

    Attributes:
        cliff_period: time after the start before anything beyond the instant
            share unlocks.
        vesting_period: time after the start at which everything is unlocked.
            Must be strictly greater than `cliff_period`.
        instant_claim_percentage: optional share (bps) claimable right at the start.
        scheme: see `VestingScheme`.
    """

    cliff_period: int
    vesting_period: int
    instant_claim_percentage: Optional[int] = None
    scheme: VestingScheme = VestingScheme.IMMEDIATE

    def validate(self) -> None:
        if self.cliff_period < 0:
            raise ConfigError("cliff_period must be non-negative", field="cliff_period")
        if self.vesting_period <= self.cliff_period:
            raise ConfigError(
                "vesting_period must be greater than cliff_period",
                field="vesting_period",
                details={"cliff_period": self.cliff_period, "vesting_period": self.vesting_period},
            )
        pct = self.instant_claim_percentage
        if pct is not None and not (0 <= pct <= BPS_DEN):
            raise ConfigError(
                "instant_claim_percentage must be within 0..10000",
                field="instant_claim_percentage",
                details={"instant_claim_percentage": pct},
            )

    def instant_amount(self, allocation: int) -> int:
        if self.instant_claim_percentage is None:
            return 0
        return apply_bps(allocation, self.instant_claim_percentage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cliff_period": self.cliff_period,
            "vesting_period": self.vesting_period,
            "instant_claim_percentage": self.instant_claim_percentage,
            "scheme": self.scheme.value,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "VestingSchedule":
        pct = d.get("instant_claim_percentage")
        return VestingSchedule(
            cliff_period=int(d["cliff_period"]),
            vesting_period=int(d["vesting_period"]),
            instant_claim_percentage=int(pct) if pct is not None else None,
            scheme=VestingScheme(str(d.get("scheme", VestingScheme.IMMEDIATE.value)).lower()),
        )


def user_allocation(weight: int, total_sold_tokens: int, mechanic: Mechanic, sale_amount: int) -> int:
    """Total sale tokens owed for `weight`."""
    if is_fixed_price(mechanic):
        return weight
    if weight == 0 or total_sold_tokens == 0:
        return 0
    return scale(weight, sale_amount, total_sold_tokens)


def releasable(allocation: int, vesting: Optional[VestingSchedule], start: int, t: int) -> int:
    """Cumulative amount of `allocation` unlocked at `t`."""
    if vesting is None:
        return allocation

    cliff_end = start + vesting.cliff_period
    instant = vesting.instant_amount(allocation)
    if t < cliff_end:
        return instant
    if t >= start + vesting.vesting_period:
        return allocation

    if vesting.scheme is VestingScheme.AFTER_CLIFF:
        elapsed = t - cliff_end
        period = vesting.vesting_period - vesting.cliff_period
    else:
        elapsed = t - start
        period = vesting.vesting_period

    remainder = allocation - instant
    if remainder < 0:  # pragma: no cover - apply_bps bounds the instant share
        raise InvariantViolation("instant share exceeds allocation")
    return instant + scale(remainder, elapsed, period)


def available_for_claim(
    investment: Investment,
    total_sold_tokens: int,
    config: "SaleConfig",
    t: int,
) -> int:
    """Releasable-to-date for a participant. Does not subtract `claimed`."""
    allocation = user_allocation(investment.weight, total_sold_tokens, config.mechanic, config.sale_amount)
    return releasable(allocation, config.vesting, config.vesting_start(), t)


def individual_releasable(stakeholder: "Stakeholder", start: int, t: int) -> int:
    """Releasable-to-date of a stakeholder's reserved allocation on its own schedule."""
    return releasable(stakeholder.allocation, stakeholder.vesting, start, t)


def claimable(releasable_to_date: int, claimed: int) -> int:
    return saturating_sub(releasable_to_date, claimed)


def remaining_vesting(allocation: int, releasable_to_date: int) -> int:
    """Part of `allocation` still locked behind the release curve."""
    return saturating_sub(allocation, releasable_to_date)


__all__ = [
    "VestingScheme",
    "VestingSchedule",
    "user_allocation",
    "releasable",
    "available_for_claim",
    "individual_releasable",
    "claimable",
    "remaining_vesting",
]
