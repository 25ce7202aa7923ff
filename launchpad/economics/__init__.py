from __future__ import annotations

"""
launchpad.economics
===================

Pure integer workflows behind the launchpad state machine: scaling
primitives, discounts, mechanics, deposit/withdraw outcomes, allocation and
vesting, and distribution batches. Nothing here holds state or logs.
"""


from typing import List

from .claim import VestingSchedule, VestingScheme, available_for_claim, releasable, user_allocation
from .deposit import DepositOutcome, deposit_outcome
from .discount import Discount, apply_discount, find_active, revert_discount
from .distribution import DepositSplit, DistributionPlan, Stakeholder, pending_recipients, record_batch
from .mechanics import PRICE_DISCOVERY, FixedPrice, Investment, PriceDiscovery
from .scaling import revert, scale
from .withdraw import WithdrawOutcome, withdraw_outcome

__all__: List[str] = [
    "scale",
    "revert",
    "Discount",
    "find_active",
    "apply_discount",
    "revert_discount",
    "FixedPrice",
    "PriceDiscovery",
    "PRICE_DISCOVERY",
    "Investment",
    "DepositOutcome",
    "deposit_outcome",
    "WithdrawOutcome",
    "withdraw_outcome",
    "VestingSchedule",
    "VestingScheme",
    "user_allocation",
    "releasable",
    "available_for_claim",
    "DistributionPlan",
    "Stakeholder",
    "DepositSplit",
    "pending_recipients",
    "record_batch",
]
