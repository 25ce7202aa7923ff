from __future__ import annotations

import pytest

from launchpad.economics.claim import VestingSchedule
from launchpad.economics.discount import Discount
from launchpad.economics.distribution import DistributionPlan, Stakeholder
from launchpad.economics.mechanics import PRICE_DISCOVERY, FixedPrice

from . import START, make_config

# 10% bonus for the first 500 seconds of the sale.
EARLY_BONUS = Discount(start_time=START, end_time=START + 500, percentage=1_000)


@pytest.fixture
def fp_config():
    return make_config(FixedPrice(1, 1))


@pytest.fixture
def pd_config():
    return make_config(PRICE_DISCOVERY)


@pytest.fixture
def early_bonus():
    return EARLY_BONUS


@pytest.fixture
def plan():
    return DistributionPlan(
        solver_account="solver",
        solver_allocation=1_000,
        stakeholders=(
            Stakeholder("team", 2_000),
            Stakeholder("advisor", 3_000),
            Stakeholder("vc", 4_000, vesting=VestingSchedule(cliff_period=100, vesting_period=1_000)),
        ),
    )
