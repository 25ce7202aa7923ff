from __future__ import annotations
"""
Launchpad test suite package.

Shared helpers and Hypothesis profile registration. Importing this package
registers the dev/ci/fast/stress profiles and selects one from
HYPOTHESIS_PROFILE (or "ci" when CI is set, "dev" otherwise).
"""


import os
from typing import Final, Optional, Sequence

from hypothesis import HealthCheck, settings

from launchpad.config import SaleConfig
from launchpad.economics.claim import VestingSchedule
from launchpad.economics.discount import Discount
from launchpad.economics.distribution import DistributionPlan
from launchpad.economics.mechanics import FixedPrice, Mechanic
from launchpad.state import LaunchpadState, deposit, init

# Canonical deterministic seed for tests that need pseudo-randomness.
TEST_SEED: int = 0x1A0C4BAD

START: Final[int] = 1_000
END: Final[int] = 2_000
DEPOSIT_TOKEN: Final[str] = "usdc.token"
SALE_TOKEN: Final[str] = "sale.token"

# ---- hypothesis profiles -----------------------------------------------------

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow, HealthCheck.filter_too_much),
        derandomize=True,
    ),
)
settings.register_profile("fast", settings(max_examples=25, deadline=None))
settings.register_profile(
    "stress",
    settings(max_examples=1000, deadline=None, suppress_health_check=(HealthCheck.too_slow,), derandomize=True),
)


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev"))


# ---- builders ----------------------------------------------------------------


def make_config(
    mechanic: Mechanic = FixedPrice(1, 1),
    *,
    sale_amount: int = 200_000,
    soft_cap: int = 100_000,
    discounts: Sequence[Discount] = (),
    vesting: Optional[VestingSchedule] = None,
    distribution: Optional[DistributionPlan] = None,
    min_deposit: int = 0,
    tge: Optional[int] = None,
) -> SaleConfig:
    reserved = distribution.reserved_total() if distribution else 0
    return SaleConfig(
        deposit_token=DEPOSIT_TOKEN,
        sale_token=SALE_TOKEN,
        start_time=START,
        end_time=END,
        soft_cap=soft_cap,
        mechanic=mechanic,
        sale_amount=sale_amount,
        total_sale_amount=sale_amount + reserved,
        vesting=vesting,
        distribution=distribution,
        discounts=tuple(discounts),
        min_deposit=min_deposit,
        tge=tge,
    )


def funded_state(cfg: SaleConfig) -> LaunchpadState:
    """Initial state after the sale token deposited the full issuable supply."""
    return deposit(init(cfg), cfg.sale_token, cfg.total_sale_amount, cfg.sale_token, 0).state


__all__ = [
    "TEST_SEED",
    "START",
    "END",
    "DEPOSIT_TOKEN",
    "SALE_TOKEN",
    "make_config",
    "funded_state",
]
