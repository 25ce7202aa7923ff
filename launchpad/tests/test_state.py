from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from launchpad import state as sm
from launchpad.economics.claim import VestingSchedule
from launchpad.economics.distribution import DepositSplit
from launchpad.economics.mechanics import FixedPrice, Investment
from launchpad.effects import DEPOSIT_TOKEN, SALE_TOKEN, Transfer
from launchpad.errors import (
    ConfigError,
    InvalidAmount,
    InvalidStatus,
    InvariantViolation,
    NothingToDistribute,
    Unauthorized,
    UnknownParticipant,
)
from launchpad.state import Status

from . import DEPOSIT_TOKEN as USDC
from . import END, START, funded_state, make_config

MID = (START + END) // 2


# ---- status ----------------------------------------------------------------------


def test_status_derivation(fp_config):
    s = sm.init(fp_config)
    assert sm.status(s, MID) is Status.NOT_INITIALIZED
    s = funded_state(fp_config)
    assert sm.status(s, START - 1) is Status.NOT_STARTED
    assert sm.status(s, START) is Status.ONGOING
    assert sm.status(s, END - 1) is Status.ONGOING
    assert sm.status(s, END) is Status.FAILED
    s = sm.deposit(s, "alice", 100_000, "alice", MID).state
    assert sm.status(s, END) is Status.SUCCESS
    assert sm.status(dataclasses.replace(s, is_locked=True), END) is Status.LOCKED


@given(
    sale_token_set=st.booleans(),
    locked=st.booleans(),
    deposited=st.integers(min_value=0, max_value=300_000),
    t1=st.integers(min_value=0, max_value=3_000),
    t2=st.integers(min_value=0, max_value=3_000),
)
def test_status_is_monotonic_in_time(sale_token_set, locked, deposited, t1, t2):
    s = dataclasses.replace(
        sm.init(make_config()),
        is_sale_token_set=sale_token_set,
        is_locked=locked,
        total_deposited=deposited,
    )
    lo, hi = sorted((t1, t2))
    order = [Status.NOT_STARTED, Status.ONGOING, Status.SUCCESS]
    a, b = sm.status(s, lo), sm.status(s, hi)
    if a in (Status.NOT_INITIALIZED, Status.LOCKED, Status.SUCCESS, Status.FAILED):
        assert b is a
    elif a is Status.ONGOING and hi < END:
        assert b is Status.ONGOING
    else:
        assert b in order + [Status.FAILED]


# ---- init / funding --------------------------------------------------------------


def test_init_rejects_invalid_config(fp_config):
    with pytest.raises(ConfigError):
        sm.init(dataclasses.replace(fp_config, total_sale_amount=1))


def test_funding_deposit_flips_the_flag_once(fp_config):
    s = sm.init(fp_config)
    with pytest.raises(InvalidAmount):
        sm.deposit(s, fp_config.sale_token, 1, fp_config.sale_token, 0)
    with pytest.raises(InvalidStatus):
        sm.deposit(s, "alice", 100, "alice", MID)
    t = sm.deposit(s, fp_config.sale_token, fp_config.total_sale_amount, fp_config.sale_token, 0)
    assert t.state.is_sale_token_set
    assert t.effects == ()
    assert t.delta.sale_token_set is True
    assert t.state.participants_count == 0
    # a second funding deposit is just a deposit outside the sale window
    with pytest.raises(InvalidStatus):
        sm.deposit(t.state, fp_config.sale_token, fp_config.total_sale_amount, fp_config.sale_token, 0)


# ---- deposit ---------------------------------------------------------------------


def test_deposit_gates(fp_config):
    s = funded_state(fp_config)
    with pytest.raises(InvalidStatus):
        sm.deposit(s, "alice", 10, "alice", START - 1)
    with pytest.raises(InvalidStatus):
        sm.deposit(s, "alice", 10, "alice", END)
    with pytest.raises(InvalidAmount):
        sm.deposit(s, "alice", 0, "alice", MID)
    with pytest.raises(Unauthorized):
        sm.deposit(s, "alice", 10, "alice", MID, token="other.token")
    sm.deposit(s, "alice", 10, "alice", MID, token=USDC)

    strict = funded_state(make_config(min_deposit=50))
    with pytest.raises(InvalidAmount):
        sm.deposit(strict, "alice", 49, "alice", MID)


def test_deposit_lifecycle_fills_the_cap(fp_config):
    s = funded_state(fp_config)
    a = sm.deposit(s, "alice.near", 100_000, "alice", MID)
    b = sm.deposit(a.state, "bob.near", 100_000, "bob", MID)
    assert (a.refund, b.refund) == (0, 0)
    s = b.state
    assert s.total_sold_tokens == 200_000
    assert s.participants_count == 2
    assert s.accounts == {"alice.near": "alice", "bob.near": "bob"}
    s.check_totals()

    c = sm.deposit(s, "carol.near", 5_000, "carol", MID)
    assert (c.accepted, c.refund) == (0, 5_000)
    assert c.effects == (Transfer(DEPOSIT_TOKEN, "carol.near", 5_000, "refund"),)
    assert "carol" not in c.state.investments
    assert c.state.participants_count == 2
    assert sm.status(c.state, END) is Status.SUCCESS


def test_over_cap_deposit_emits_refund(fp_config):
    t = sm.deposit(funded_state(fp_config), "whale.near", 210_000, "whale", MID)
    assert (t.accepted, t.refund, t.weight_added) == (200_000, 10_000, 200_000)
    assert t.effects == (Transfer(DEPOSIT_TOKEN, "whale.near", 10_000, "refund"),)
    assert t.delta.total_deposited == 200_000
    assert t.state.revision == t.base_revision + 1


def test_fixed_price_sequences_respect_the_cap():
    cfg = make_config(FixedPrice(3, 2), sale_amount=10_000)
    s = funded_state(cfg)
    for i, amount in enumerate([4_000, 3_333, 9_999, 1, 77]):
        t = sm.deposit(s, f"u{i}", amount, f"u{i}", MID)
        assert t.refund <= amount
        s = t.state
        assert s.total_sold_tokens <= cfg.sale_amount
        s.check_totals()


# ---- withdraw --------------------------------------------------------------------


def test_withdraw_gates_by_mechanic(fp_config, pd_config):
    fp = sm.deposit(funded_state(fp_config), "alice", 1_000, "alice", MID).state
    with pytest.raises(InvalidStatus):
        sm.withdraw(fp, "alice", 1_000, MID)
    with pytest.raises(UnknownParticipant):
        sm.withdraw(fp, "bob", 1_000, END)
    t = sm.withdraw(fp, "alice", 1_000, END)  # FAILED
    assert t.effects == (Transfer(DEPOSIT_TOKEN, "alice", 1_000, "withdraw"),)
    assert t.state.investments["alice"] == Investment()

    pd = sm.deposit(funded_state(pd_config), "alice", 100_000, "alice", MID).state
    t = sm.withdraw(pd, "alice", 50_000, MID)
    assert t.state.investments["alice"] == Investment(amount=50_000, weight=50_000)
    assert t.state.total_sold_tokens == 50_000
    succeeded = sm.deposit(pd, "bob", 100_000, "bob", MID).state
    with pytest.raises(InvalidStatus):
        sm.withdraw(succeeded, "alice", 1, END)


def test_withdraw_allowed_while_locked(fp_config):
    s = sm.deposit(funded_state(fp_config), "alice", 1_000, "alice", MID).state
    s = sm.lock(s, MID).state
    assert sm.status(s, MID) is Status.LOCKED
    assert sm.withdraw(s, "alice", 1_000, MID).state.total_deposited == 0


# ---- claim -----------------------------------------------------------------------


def test_claim_after_success(pd_config):
    s = funded_state(pd_config)
    s = sm.deposit(s, "alice", 100_000, "alice", MID).state
    s = sm.deposit(s, "bob", 300_000, "bob", MID).state
    with pytest.raises(InvalidStatus):
        sm.claim(s, "alice", MID)
    with pytest.raises(UnknownParticipant):
        sm.claim(s, "carol", END)

    assert sm.available_for_claim(s, "alice", MID) == 0
    assert sm.available_for_claim(s, "alice", END) == 50_000
    t = sm.claim(s, "alice", END)
    assert t.amount == 50_000
    assert t.effects == (Transfer(SALE_TOKEN, "alice", 50_000, "claim"),)
    again = sm.claim(t.state, "alice", END + 10)
    assert again.amount == 0
    assert again.effects == ()
    assert sm.get_investment(again.state, "alice").claimed == 50_000


def test_claim_follows_vesting():
    cfg = make_config(vesting=VestingSchedule(cliff_period=100, vesting_period=1_000), soft_cap=0)
    s = sm.deposit(funded_state(cfg), "alice", 1_000, "alice", MID).state
    assert sm.claim(s, "alice", END + 50).amount == 0
    t = sm.claim(s, "alice", END + 500)
    assert t.amount == 500
    assert sm.claim(t.state, "alice", END + 1_000).amount == 500


# ---- distribution ----------------------------------------------------------------


def test_distribution_batches(plan):
    cfg = make_config(distribution=plan, soft_cap=0)
    s = funded_state(cfg)
    with pytest.raises(InvalidStatus):
        sm.distribute_next(s, MID)
    first = sm.distribute_next(s, END, limit=2)
    assert [e.recipient for e in first.effects] == ["solver", "team"]
    second = sm.distribute_next(first.state, END)
    assert second.effects == (Transfer(SALE_TOKEN, "advisor", 3_000, "distribution"),)
    assert second.state.distributed_accounts == ("solver", "team", "advisor")
    with pytest.raises(NothingToDistribute):
        sm.distribute_next(second.state, END)


def test_individual_vesting_claim(plan):
    cfg = make_config(distribution=plan, soft_cap=0)
    s = funded_state(cfg)
    with pytest.raises(UnknownParticipant):
        sm.claim_individual(s, "team", END)
    t = sm.claim_individual(s, "vc", END + 500)
    assert t.amount == 2_000
    assert t.state.individual_claims == {"vc": 2_000}
    assert sm.claim_individual(t.state, "vc", END + 2_000).amount == 2_000


def test_distribute_deposits_once(plan):
    plan = dataclasses.replace(plan, deposits=DepositSplit(9_000, "fees", 500))
    cfg = make_config(distribution=plan)
    s = sm.deposit(funded_state(cfg), "alice", 100_000, "alice", MID).state
    t = sm.distribute_deposits(s, END)
    assert t.effects == (
        Transfer(DEPOSIT_TOKEN, "solver", 90_000, "deposit_distribution"),
        Transfer(DEPOSIT_TOKEN, "fees", 5_000, "fee"),
    )
    with pytest.raises(NothingToDistribute):
        sm.distribute_deposits(t.state, END)


# ---- admin -----------------------------------------------------------------------


def test_lock_unlock(fp_config):
    s = funded_state(fp_config)
    with pytest.raises(InvalidStatus):
        sm.unlock(s)
    with pytest.raises(InvalidStatus):
        sm.lock(s, END)
    locked = sm.lock(s, START - 10).state
    assert sm.status(locked, END + 10_000) is Status.LOCKED
    with pytest.raises(InvalidStatus):
        sm.deposit(locked, "alice", 1, "alice", MID)
    unlocked = sm.unlock(locked).state
    assert sm.status(unlocked, MID) is Status.ONGOING


def test_admin_withdraw_gates(fp_config):
    s = funded_state(fp_config)
    with pytest.raises(InvalidStatus):
        sm.admin_withdraw(s, DEPOSIT_TOKEN, "admin", 1, END)  # FAILED
    t = sm.admin_withdraw(s, SALE_TOKEN, "admin", 200_000, END)
    assert t.effects == (Transfer(SALE_TOKEN, "admin", 200_000, "admin_withdraw"),)
    assert t.delta.is_empty()
    with pytest.raises(Unauthorized):
        sm.admin_withdraw(s, "other", "admin", 1, END)

    won = sm.deposit(s, "alice", 100_000, "alice", MID).state
    sm.admin_withdraw(won, DEPOSIT_TOKEN, "admin", 100_000, END)
    with pytest.raises(InvalidStatus):
        sm.admin_withdraw(won, SALE_TOKEN, "admin", 1, END)


# ---- compensation ----------------------------------------------------------------


def test_compensate_restores_only_the_touched_participant(pd_config):
    s = funded_state(pd_config)
    s = sm.deposit(s, "alice", 100_000, "alice", MID).state
    w = sm.withdraw(s, "alice", 40_000, MID)
    later = sm.deposit(w.state, "bob", 7_000, "bob", MID).state
    restored = sm.compensate(later, w)
    assert restored.investments["alice"] == Investment(amount=100_000, weight=100_000)
    assert restored.investments["bob"] == Investment(amount=7_000, weight=7_000)
    assert restored.total_deposited == 107_000
    assert restored.revision == later.revision + 1
    restored.check_totals()


def test_compensate_claim_and_distribution(plan):
    cfg = make_config(distribution=plan, soft_cap=0)
    s = sm.deposit(funded_state(cfg), "alice", 1_000, "alice", MID).state
    c = sm.claim(s, "alice", END)
    assert sm.compensate(c.state, c).investments["alice"].claimed == 0
    d = sm.distribute_next(c.state, END, limit=1)
    undone = sm.compensate(d.state, d)
    assert undone.distributed_accounts == ()
    assert sm.distribute_next(undone, END, limit=1).effects[0].recipient == "solver"


def test_compensate_lock(fp_config):
    s = funded_state(fp_config)
    t = sm.lock(s, MID)
    assert not sm.compensate(t.state, t).is_locked


def test_compensate_first_deposit_forgets_the_participant(pd_config):
    s = funded_state(pd_config)
    t = sm.deposit(s, "alice.near", 10, "alice", MID)
    assert t.delta.participants_added == ("alice",)
    assert t.delta.accounts_added == (("alice.near", "alice"),)
    later = sm.deposit(t.state, "bob", 7, "bob", MID).state

    restored = sm.compensate(later, t)
    assert "alice" not in restored.investments
    assert restored.accounts == {"bob": "bob"}
    assert restored.participants_count == 1
    restored.check_totals()


def test_compensate_first_deposit_keeps_a_participant_with_later_funds(pd_config):
    s = funded_state(pd_config)
    first = sm.deposit(s, "alice.near", 10, "alice", MID)
    second = sm.deposit(first.state, "alice.near", 5, "alice", MID)
    assert second.delta.participants_added == ()

    restored = sm.compensate(second.state, first)
    assert restored.investments["alice"] == Investment(amount=5, weight=5)
    assert restored.accounts == {"alice.near": "alice"}
    assert restored.participants_count == 1
    restored.check_totals()


# ---- tge and allocation views ----------------------------------------------------


def test_tge_holds_claims_and_anchors_vesting():
    tge = END + 500
    cfg = make_config(vesting=VestingSchedule(cliff_period=100, vesting_period=1_000), soft_cap=0, tge=tge)
    s = sm.deposit(funded_state(cfg), "alice", 1_000, "alice", MID).state

    assert sm.status(s, END) is Status.PRE_TGE
    assert sm.status(s, tge - 1) is Status.PRE_TGE
    assert sm.status(s, tge) is Status.SUCCESS
    with pytest.raises(InvalidStatus):
        sm.claim(s, "alice", END + 400)
    assert sm.available_for_claim(s, "alice", END) == 0
    assert sm.status(sm.lock(s, END).state, END) is Status.LOCKED

    assert sm.claim(s, "alice", tge + 50).amount == 0
    assert sm.claim(s, "alice", tge + 500).amount == 500


def test_tge_unset_keeps_success_at_end(fp_config):
    s = sm.deposit(funded_state(fp_config), "alice", 100_000, "alice", MID).state
    assert sm.status(s, END) is Status.SUCCESS


def test_allocation_views(pd_config):
    s = funded_state(pd_config)
    s = sm.deposit(s, "alice", 100_000, "alice", MID).state
    s = sm.deposit(s, "bob", 300_000, "bob", MID).state
    assert sm.user_allocation(s, "alice") == 50_000
    assert sm.user_allocation(s, "carol") == 0
    assert sm.remaining_vesting(s, "alice", END) == 0
    assert sm.remaining_vesting(s, "carol", END) == 0

    cfg = make_config(vesting=VestingSchedule(cliff_period=100, vesting_period=1_000), soft_cap=0)
    v = sm.deposit(funded_state(cfg), "alice", 1_000, "alice", MID).state
    assert sm.user_allocation(v, "alice") == 1_000
    assert sm.remaining_vesting(v, "alice", END + 50) == 1_000
    assert sm.remaining_vesting(v, "alice", END + 500) == 500
    assert sm.remaining_vesting(v, "alice", END + 1_000) == 0


def test_individual_vesting_views(plan):
    s = funded_state(make_config(distribution=plan, soft_cap=0))
    assert sm.individual_allocation(s, "vc") == 4_000
    assert sm.individual_allocation(s, "team") == 0
    assert sm.individual_remaining_vesting(s, "vc", END + 500) == 2_000
    assert sm.available_for_individual_claim(s, "vc", END + 500) == 2_000

    claimed = sm.claim_individual(s, "vc", END + 500).state
    assert sm.available_for_individual_claim(claimed, "vc", END + 500) == 0
    assert sm.individual_remaining_vesting(claimed, "vc", END + 500) == 2_000
    assert sm.individual_remaining_vesting(claimed, "nobody", END + 500) == 0


# ---- partial settlement ----------------------------------------------------------


def test_settle_partial_distribution_batch(plan):
    s = funded_state(make_config(distribution=plan, soft_cap=0))
    t = sm.distribute_next(s, END)
    settled = sm.settle_partial(t, 2)
    assert [e.recipient for e in settled.effects] == ["solver", "team"]
    assert settled.state.distributed_accounts == ("solver", "team")
    assert settled.delta.recipients_added == ("solver", "team")
    assert settled.state.revision == t.state.revision

    rest = sm.distribute_next(settled.state, END)
    assert rest.effects == (Transfer(SALE_TOKEN, "advisor", 3_000, "distribution"),)
    assert sm.settle_partial(t, len(t.effects)) is t


def test_settle_partial_deposit_legs(plan):
    plan = dataclasses.replace(plan, deposits=DepositSplit(9_000, "fees", 500))
    s = sm.deposit(funded_state(make_config(distribution=plan)), "alice", 100_000, "alice", MID).state
    t = sm.distribute_deposits(s, END)
    settled = sm.settle_partial(t, 1)
    assert not settled.state.deposits_distributed
    assert settled.state.deposit_legs_paid == ("deposit_distribution",)

    fee = sm.distribute_deposits(settled.state, END)
    assert fee.effects == (Transfer(DEPOSIT_TOKEN, "fees", 5_000, "fee"),)
    assert fee.state.deposits_distributed
    with pytest.raises(NothingToDistribute):
        sm.distribute_deposits(fee.state, END)


def test_settle_partial_rejects_single_transfer_operations(fp_config):
    t = sm.deposit(funded_state(fp_config), "whale", 210_000, "whale", MID)
    with pytest.raises(InvariantViolation):
        sm.settle_partial(t, 0)
