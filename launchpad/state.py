from __future__ import annotations

"""
Launchpad aggregate state and its transitions.

`LaunchpadState` is an immutable snapshot. Every operation here validates its
preconditions against the snapshot, raises a typed `LaunchpadError` before
building anything if they fail, and otherwise returns a `Transition` carrying
a complete replacement snapshot, the outbound transfers to issue, and the
`Delta` it applied. No snapshot is ever modified in place.

Lifecycle
---------
    NOT_INITIALIZED  sale token not yet funded
    LOCKED           administrative halt
    NOT_STARTED      now < start_time
    ONGOING          start_time <= now < end_time
    PRE_TGE          sale succeeded but now < tge (only when a tge is configured)
    SUCCESS          now >= end_time (and >= tge) and total_deposited >= soft_cap
    FAILED           now >= end_time and total_deposited <  soft_cap

Checked in that order, so exactly one applies. With the flags held fixed the
status only moves forward in time, and SUCCESS / FAILED / LOCKED are never
left.

Operation gates
---------------
    deposit            ONGOING (or the one-time funding deposit in NOT_INITIALIZED)
    withdraw           PriceDiscovery + ONGOING, or FAILED, or LOCKED
    claim              SUCCESS
    claim_individual   SUCCESS
    distribute_next    SUCCESS with pending recipients
    distribute_deposits SUCCESS, each leg once
    lock               NOT_STARTED, ONGOING or PRE_TGE
    unlock             LOCKED
    admin_withdraw     deposit token after SUCCESS; sale token in FAILED / LOCKED
"""


import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from .config import SaleConfig
from .economics.claim import available_for_claim as _releasable_for
from .economics.claim import claimable, individual_releasable
from .economics.claim import remaining_vesting as _remaining
from .economics.claim import user_allocation as _allocation_for
from .economics.deposit import deposit_outcome
from .economics.distribution import pending_recipients, record_batch, split_deposits
from .economics.mechanics import Investment, is_fixed_price
from .economics.withdraw import withdraw_outcome
from .effects import (
    DEPOSIT_LEGS,
    DEPOSIT_TOKEN,
    FEE,
    SALE_TOKEN,
    SOLVER_PROCEEDS,
    ClaimTransition,
    Delta,
    DepositTransition,
    Transfer,
    Transition,
)
from .errors import (
    InvalidAmount,
    InvalidStatus,
    InvariantViolation,
    NothingToDistribute,
    Unauthorized,
    UnknownParticipant,
)

log = logging.getLogger(__name__)

T = TypeVar("T", bound=Transition)


class Status(Enum):
    NOT_INITIALIZED = "not_initialized"
    LOCKED = "locked"
    NOT_STARTED = "not_started"
    ONGOING = "ongoing"
    PRE_TGE = "pre_tge"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class LaunchpadState:
    config: SaleConfig
    total_deposited: int = 0
    total_sold_tokens: int = 0
    is_sale_token_set: bool = False
    is_locked: bool = False
    accounts: Mapping[str, str] = field(default_factory=dict)  # depositor -> participant
    participants_count: int = 0
    investments: Mapping[str, Investment] = field(default_factory=dict)
    distributed_accounts: Tuple[str, ...] = ()
    individual_claims: Mapping[str, int] = field(default_factory=dict)
    deposit_legs_paid: Tuple[str, ...] = ()
    revision: int = 0

    @property
    def deposits_distributed(self) -> bool:
        return set(DEPOSIT_LEGS) <= set(self.deposit_legs_paid)

    def check_totals(self) -> None:
        """Raise if the totals drifted from the sums of the live investments."""
        if self.participants_count != len(self.investments):
            raise InvariantViolation(
                "participants_count does not match investments",
                details={"participants_count": self.participants_count, "investments": len(self.investments)},
            )
        dep = sum(i.amount for i in self.investments.values())
        sold = sum(i.weight for i in self.investments.values())
        if dep != self.total_deposited or sold != self.total_sold_tokens:
            raise InvariantViolation(
                "totals do not match investments",
                details={
                    "total_deposited": self.total_deposited,
                    "sum_amount": dep,
                    "total_sold_tokens": self.total_sold_tokens,
                    "sum_weight": sold,
                },
            )
        if is_fixed_price(self.config.mechanic) and self.total_sold_tokens > self.config.sale_amount:
            raise InvariantViolation(
                "total_sold_tokens exceeds sale_amount",
                details={"total_sold_tokens": self.total_sold_tokens, "sale_amount": self.config.sale_amount},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "total_deposited": self.total_deposited,
            "total_sold_tokens": self.total_sold_tokens,
            "is_sale_token_set": self.is_sale_token_set,
            "is_locked": self.is_locked,
            "accounts": dict(sorted(self.accounts.items())),
            "participants_count": self.participants_count,
            "investments": {k: v.to_dict() for k, v in sorted(self.investments.items())},
            "distributed_accounts": list(self.distributed_accounts),
            "individual_claims": dict(sorted(self.individual_claims.items())),
            "deposit_legs_paid": list(self.deposit_legs_paid),
            "deposits_distributed": self.deposits_distributed,
            "revision": self.revision,
        }


# -------------------------- Status --------------------------


def status(state: LaunchpadState, now: int) -> Status:
    cfg = state.config
    if not state.is_sale_token_set:
        return Status.NOT_INITIALIZED
    if state.is_locked:
        return Status.LOCKED
    if now < cfg.start_time:
        return Status.NOT_STARTED
    if now < cfg.end_time:
        return Status.ONGOING
    if state.total_deposited >= cfg.soft_cap:
        if cfg.tge is not None and now < cfg.tge:
            return Status.PRE_TGE
        return Status.SUCCESS
    return Status.FAILED


def _require(state: LaunchpadState, now: int, operation: str, *allowed: Status) -> Status:
    st = status(state, now)
    if st not in allowed:
        raise InvalidStatus(
            operation=operation,
            status=st.value,
            details={"allowed": [s.value for s in allowed]},
        )
    return st


# -------------------------- Helpers --------------------------


def _diff(old: LaunchpadState, new: LaunchpadState, participant: Optional[str]) -> Delta:
    before = old.investments.get(participant, Investment()) if participant else Investment()
    after = new.investments.get(participant, Investment()) if participant else Investment()
    ind_before = old.individual_claims.get(participant, 0) if participant else 0
    ind_after = new.individual_claims.get(participant, 0) if participant else 0
    old_log = set(old.distributed_accounts)
    old_legs = set(old.deposit_legs_paid)
    created = participant is not None and participant not in old.investments and participant in new.investments
    accounts_added: Tuple[Tuple[str, str], ...] = ()
    accounts_removed: Tuple[Tuple[str, str], ...] = ()
    if new.accounts is not old.accounts:
        accounts_added = tuple((d, p) for d, p in new.accounts.items() if old.accounts.get(d) != p)
        accounts_removed = tuple((d, p) for d, p in old.accounts.items() if new.accounts.get(d) != p)
    return Delta(
        participant=participant,
        amount=after.amount - before.amount,
        weight=after.weight - before.weight,
        claimed=after.claimed - before.claimed,
        individual_claimed=ind_after - ind_before,
        total_deposited=new.total_deposited - old.total_deposited,
        total_sold_tokens=new.total_sold_tokens - old.total_sold_tokens,
        recipients_added=tuple(a for a in new.distributed_accounts if a not in old_log),
        participants_added=(participant,) if created else (),
        accounts_added=accounts_added,
        accounts_removed=accounts_removed,
        deposit_legs_added=tuple(leg for leg in new.deposit_legs_paid if leg not in old_legs),
        sale_token_set=new.is_sale_token_set if new.is_sale_token_set != old.is_sale_token_set else None,
        locked=new.is_locked if new.is_locked != old.is_locked else None,
    )


def _transition(
    cls: Type[T],
    operation: str,
    old: LaunchpadState,
    new: LaunchpadState,
    participant: Optional[str] = None,
    effects: Tuple[Transfer, ...] = (),
    **extra: int,
) -> T:
    new = replace(new, revision=old.revision + 1)
    return cls(
        operation=operation,
        state=new,
        base_revision=old.revision,
        effects=tuple(e for e in effects if e.amount > 0),
        delta=_diff(old, new, participant),
        **extra,
    )


def _with_investment(state: LaunchpadState, participant: str, inv: Investment) -> Dict[str, Investment]:
    investments = dict(state.investments)
    investments[participant] = inv
    return investments


# -------------------------- Operations --------------------------


def init(config: SaleConfig) -> LaunchpadState:
    """Validate `config` and return the zeroed initial snapshot."""
    config.validate()
    log.info("launchpad: initialized sale_amount=%d total_sale_amount=%d mechanic=%s",
             config.sale_amount, config.total_sale_amount, config.mechanic.kind)
    return LaunchpadState(config=config)


def _fund_sale_token(
    state: LaunchpadState, depositor: str, amount: int, token: Optional[str]
) -> DepositTransition:
    cfg = state.config
    if depositor != cfg.sale_token or (token is not None and token != cfg.sale_token):
        raise InvalidStatus(
            operation="deposit",
            status=Status.NOT_INITIALIZED.value,
            message="only the sale token can fund an uninitialized sale",
            details={"depositor": depositor},
        )
    if amount != cfg.total_sale_amount:
        raise InvalidAmount(
            "funding deposit must equal total_sale_amount",
            amount=amount,
            details={"total_sale_amount": cfg.total_sale_amount},
        )
    log.info("launchpad: sale token funded amount=%d", amount)
    return _transition(
        DepositTransition, "init", state, replace(state, is_sale_token_set=True), accepted=amount
    )


def deposit(
    state: LaunchpadState,
    depositor: str,
    amount: int,
    participant: str,
    now: int,
    *,
    token: Optional[str] = None,
) -> DepositTransition:
    """
    Deposit `amount` from `depositor` on behalf of `participant`.

    Any part that does not fit under a FixedPrice cap comes back as a refund
    transfer to `depositor`.
    """
    cfg = state.config
    if amount <= 0:
        raise InvalidAmount("deposit amount must be positive", amount=amount)
    if not state.is_sale_token_set:
        return _fund_sale_token(state, depositor, amount, token)

    _require(state, now, "deposit", Status.ONGOING)
    if token is not None and token != cfg.deposit_token:
        raise Unauthorized("unexpected deposit token", details={"token": token, "expected": cfg.deposit_token})
    if amount < cfg.min_deposit:
        raise InvalidAmount(
            "deposit below min_deposit", amount=amount, details={"min_deposit": cfg.min_deposit}
        )

    existing = state.investments.get(participant)
    out = deposit_outcome(
        cfg.mechanic,
        cfg.discounts,
        cfg.sale_amount,
        existing or Investment(),
        state.total_deposited,
        state.total_sold_tokens,
        amount,
        now,
    )

    new = state
    if out.accepted > 0 or existing is not None:
        accounts = dict(state.accounts)
        accounts[depositor] = participant
        new = replace(
            state,
            total_deposited=out.total_deposited,
            total_sold_tokens=out.total_sold_tokens,
            accounts=accounts,
            participants_count=state.participants_count + (0 if existing is not None else 1),
            investments=_with_investment(state, participant, out.investment),
        )

    if out.refund:
        log.debug("launchpad: deposit participant=%s accepted=%d refund=%d", participant, out.accepted, out.refund)
    return _transition(
        DepositTransition,
        "deposit",
        state,
        new,
        participant,
        (Transfer(DEPOSIT_TOKEN, depositor, out.refund, "refund"),),
        accepted=out.accepted,
        refund=out.refund,
        weight_added=out.weight_added,
    )


def withdraw(state: LaunchpadState, participant: str, amount: int, now: int) -> Transition:
    cfg = state.config
    st = status(state, now)
    allowed = (
        (st is Status.ONGOING and not is_fixed_price(cfg.mechanic))
        or st is Status.FAILED
        or st is Status.LOCKED
    )
    if not allowed:
        raise InvalidStatus(operation="withdraw", status=st.value)

    inv = state.investments.get(participant)
    if inv is None:
        raise UnknownParticipant(participant=participant)

    out = withdraw_outcome(
        cfg.mechanic, cfg.discounts, inv, state.total_deposited, state.total_sold_tokens, amount, now
    )
    new = replace(
        state,
        total_deposited=out.total_deposited,
        total_sold_tokens=out.total_sold_tokens,
        investments=_with_investment(state, participant, out.investment),
    )
    log.debug("launchpad: withdraw participant=%s amount=%d weight_removed=%d",
              participant, out.withdrawn, out.weight_removed)
    return _transition(
        Transition,
        "withdraw",
        state,
        new,
        participant,
        (Transfer(DEPOSIT_TOKEN, participant, out.withdrawn, "withdraw"),),
    )


def available_for_claim(state: LaunchpadState, participant: str, now: int) -> int:
    """Sale tokens `participant` could claim at `now`; 0 unless the sale succeeded."""
    inv = state.investments.get(participant)
    if inv is None or status(state, now) is not Status.SUCCESS:
        return 0
    return claimable(_releasable_for(inv, state.total_sold_tokens, state.config, now), inv.claimed)


def get_investment(state: LaunchpadState, participant: str) -> Optional[Investment]:
    return state.investments.get(participant)


def user_allocation(state: LaunchpadState, participant: str) -> int:
    """
    Sale tokens owed to `participant` for its current weight.

    Under PriceDiscovery this is provisional until the sale closes, since
    later deposits dilute the pro-rata share.
    """
    inv = state.investments.get(participant)
    if inv is None:
        return 0
    cfg = state.config
    return _allocation_for(inv.weight, state.total_sold_tokens, cfg.mechanic, cfg.sale_amount)


def remaining_vesting(state: LaunchpadState, participant: str, now: int) -> int:
    """Allocation of `participant` not yet released by the vesting curve at `now`."""
    inv = state.investments.get(participant)
    if inv is None:
        return 0
    released = _releasable_for(inv, state.total_sold_tokens, state.config, now)
    return _remaining(user_allocation(state, participant), released)


def _individual_entry(state: LaunchpadState, stakeholder: str):
    plan = state.config.distribution
    return plan.vested_stakeholder(stakeholder) if plan is not None else None


def individual_allocation(state: LaunchpadState, stakeholder: str) -> int:
    entry = _individual_entry(state, stakeholder)
    return entry.allocation if entry is not None else 0


def individual_remaining_vesting(state: LaunchpadState, stakeholder: str, now: int) -> int:
    entry = _individual_entry(state, stakeholder)
    if entry is None:
        return 0
    return _remaining(entry.allocation, individual_releasable(entry, state.config.end_time, now))


def available_for_individual_claim(state: LaunchpadState, stakeholder: str, now: int) -> int:
    """What `claim_individual` would pay `stakeholder` at `now` (ignores the status gate)."""
    entry = _individual_entry(state, stakeholder)
    if entry is None:
        return 0
    return claimable(
        individual_releasable(entry, state.config.end_time, now),
        state.individual_claims.get(stakeholder, 0),
    )


def claim(state: LaunchpadState, participant: str, now: int) -> ClaimTransition:
    _require(state, now, "claim", Status.SUCCESS)
    inv = state.investments.get(participant)
    if inv is None:
        raise UnknownParticipant(participant=participant)

    amount = claimable(_releasable_for(inv, state.total_sold_tokens, state.config, now), inv.claimed)
    new = state
    if amount:
        new = replace(
            state,
            investments=_with_investment(state, participant, inv.with_changes(claimed=inv.claimed + amount)),
        )
    log.debug("launchpad: claim participant=%s amount=%d", participant, amount)
    return _transition(
        ClaimTransition,
        "claim",
        state,
        new,
        participant,
        (Transfer(SALE_TOKEN, participant, amount, "claim"),),
        amount=amount,
    )


def claim_individual(state: LaunchpadState, stakeholder: str, now: int) -> ClaimTransition:
    """Release a vested stakeholder's reserved allocation along its own curve."""
    _require(state, now, "claim_individual", Status.SUCCESS)
    entry = _individual_entry(state, stakeholder)
    if entry is None:
        raise UnknownParticipant(participant=stakeholder, message="no individual vesting for account")

    claimed = state.individual_claims.get(stakeholder, 0)
    amount = claimable(individual_releasable(entry, state.config.end_time, now), claimed)
    new = state
    if amount:
        claims = dict(state.individual_claims)
        claims[stakeholder] = claimed + amount
        new = replace(state, individual_claims=claims)
    log.debug("launchpad: individual claim stakeholder=%s amount=%d", stakeholder, amount)
    return _transition(
        ClaimTransition,
        "claim_individual",
        state,
        new,
        stakeholder,
        (Transfer(SALE_TOKEN, stakeholder, amount, "individual_vesting"),),
        amount=amount,
    )


def distribute_next(state: LaunchpadState, now: int, *, limit: Optional[int] = None) -> Transition:
    """Pay the next batch of reserved allocations and log the recipients."""
    _require(state, now, "distribute", Status.SUCCESS)
    plan = state.config.distribution
    batch = pending_recipients(plan, state.distributed_accounts, limit=limit) if plan is not None else []
    if not batch:
        raise NothingToDistribute("sale tokens have already been distributed")

    new = replace(state, distributed_accounts=record_batch(state.distributed_accounts, batch))
    log.info("launchpad: distributed batch size=%d remaining=%d",
             len(batch), len(pending_recipients(plan, new.distributed_accounts)))
    return _transition(
        Transition,
        "distribute",
        state,
        new,
        effects=tuple(Transfer(SALE_TOKEN, acct, alloc, "distribution") for acct, alloc in batch),
    )


def distribute_deposits(state: LaunchpadState, now: int) -> Transition:
    """Forward the configured shares of raised deposit tokens to the solver and fee accounts."""
    _require(state, now, "distribute_deposits", Status.SUCCESS)
    plan = state.config.distribution
    split = plan.deposits if plan is not None else None
    due = [leg for leg in DEPOSIT_LEGS if leg not in state.deposit_legs_paid] if split is not None else []
    if not due:
        raise NothingToDistribute("deposit tokens have already been distributed or no split is configured")

    solver_amount, fee_amount = split_deposits(split, state.total_deposited)
    legs = {
        SOLVER_PROCEEDS: Transfer(DEPOSIT_TOKEN, plan.solver_account, solver_amount, SOLVER_PROCEEDS),
        FEE: Transfer(DEPOSIT_TOKEN, split.fee_account, fee_amount, FEE),
    }
    log.info("launchpad: distributed deposits legs=%s solver=%d fee=%d", ",".join(due), solver_amount, fee_amount)
    return _transition(
        Transition,
        "distribute_deposits",
        state,
        replace(state, deposit_legs_paid=state.deposit_legs_paid + tuple(due)),
        effects=tuple(legs[leg] for leg in due),
    )


def lock(state: LaunchpadState, now: int) -> Transition:
    _require(state, now, "lock", Status.NOT_STARTED, Status.ONGOING, Status.PRE_TGE)
    log.warning("launchpad: locked")
    return _transition(Transition, "lock", state, replace(state, is_locked=True))


def unlock(state: LaunchpadState) -> Transition:
    if not (state.is_sale_token_set and state.is_locked):
        raise InvalidStatus(operation="unlock", status="not_locked")
    log.warning("launchpad: unlocked")
    return _transition(Transition, "unlock", state, replace(state, is_locked=False))


def admin_withdraw(state: LaunchpadState, token: str, recipient: str, amount: int, now: int) -> Transition:
    """
    Move raw tokens out of the sale. The deposit token is released only after
    SUCCESS; the sale token only in FAILED or LOCKED.
    """
    if amount <= 0:
        raise InvalidAmount("admin withdraw amount must be positive", amount=amount)
    if token == DEPOSIT_TOKEN:
        _require(state, now, "admin_withdraw", Status.SUCCESS)
    elif token == SALE_TOKEN:
        _require(state, now, "admin_withdraw", Status.FAILED, Status.LOCKED)
    else:
        raise Unauthorized("unknown token", details={"token": token})
    log.warning("launchpad: admin withdraw token=%s recipient=%s amount=%d", token, recipient, amount)
    return _transition(
        Transition,
        "admin_withdraw",
        state,
        state,
        effects=(Transfer(token, recipient, amount, "admin_withdraw"),),
    )


def apply_delta(state: LaunchpadState, delta: Delta) -> LaunchpadState:
    """
    Add `delta` to the live snapshot. Raises if any quantity would go negative.

    A participant listed in `participants_removed` is dropped only once its
    investment is back to zero; if later deposits still hold funds for it the
    entry stays, together with any depositor mapping that points at it.
    """
    changes: Dict[str, Any] = {}
    p = delta.participant
    investments = dict(state.investments)
    count = state.participants_count

    for added in delta.participants_added:
        if added not in investments:
            investments[added] = Investment()
            count += 1

    if p is not None and (delta.amount or delta.weight or delta.claimed):
        inv = investments.get(p, Investment())
        updated = Investment(
            amount=inv.amount + delta.amount,
            weight=inv.weight + delta.weight,
            claimed=inv.claimed + delta.claimed,
        )
        if min(updated.amount, updated.weight, updated.claimed) < 0:
            raise InvariantViolation("delta would make an investment negative", details={"participant": p})
        investments[p] = updated

    for removed in delta.participants_removed:
        if investments.get(removed) == Investment():
            del investments[removed]
            count -= 1

    if investments != state.investments:
        changes["investments"] = investments
        changes["participants_count"] = count

    if delta.accounts_added or delta.accounts_removed:
        accounts = dict(state.accounts)
        for depositor, participant in delta.accounts_removed:
            if accounts.get(depositor) == participant and participant not in investments:
                del accounts[depositor]
        for depositor, participant in delta.accounts_added:
            accounts[depositor] = participant
        changes["accounts"] = accounts

    if p is not None and delta.individual_claimed:
        claims = dict(state.individual_claims)
        value = claims.get(p, 0) + delta.individual_claimed
        if value < 0:
            raise InvariantViolation("delta would make an individual claim negative", details={"participant": p})
        claims[p] = value
        changes["individual_claims"] = claims

    total_deposited = state.total_deposited + delta.total_deposited
    total_sold = state.total_sold_tokens + delta.total_sold_tokens
    if total_deposited < 0 or total_sold < 0:
        raise InvariantViolation("delta would make a total negative")
    changes["total_deposited"] = total_deposited
    changes["total_sold_tokens"] = total_sold

    if delta.recipients_added or delta.recipients_removed:
        removed = set(delta.recipients_removed)
        kept = [a for a in state.distributed_accounts if a not in removed]
        changes["distributed_accounts"] = record_batch(kept, [(a, 0) for a in delta.recipients_added])

    if delta.deposit_legs_added or delta.deposit_legs_removed:
        gone = set(delta.deposit_legs_removed)
        legs = [leg for leg in state.deposit_legs_paid if leg not in gone]
        legs += [leg for leg in delta.deposit_legs_added if leg not in legs]
        changes["deposit_legs_paid"] = tuple(legs)

    if delta.sale_token_set is not None:
        changes["is_sale_token_set"] = delta.sale_token_set
    if delta.locked is not None:
        changes["is_locked"] = delta.locked

    changes["revision"] = state.revision + 1
    return replace(state, **changes)


def compensate(state: LaunchpadState, transition: Transition) -> LaunchpadState:
    """
    Undo `transition` on the live snapshot after its transfers failed.

    Only the participant and totals the transition touched are restored;
    anything committed since by other participants is kept.
    """
    log.warning("launchpad: compensating %s base_revision=%d", transition.operation, transition.base_revision)
    return apply_delta(state, transition.delta.negate())


def settle_partial(transition: T, issued: int) -> T:
    """
    Narrow `transition` to its first `issued` transfers.

    For batch payouts whose issuer failed partway: recipients and deposit legs
    whose transfer never went out are dropped from the snapshot and the delta,
    so the next `distribute_next` / `distribute_deposits` pays exactly them.
    Only distribution and deposit-leg transfers can be left pending.
    """
    pending = transition.effects[issued:]
    if not pending:
        return transition
    delta = transition.delta
    unpaid = {e.recipient for e in pending if e.reason == "distribution"} & set(delta.recipients_added)
    unpaid_legs = {e.reason for e in pending if e.reason in DEPOSIT_LEGS} & set(delta.deposit_legs_added)
    if len(unpaid) + len(unpaid_legs) != len(pending):
        raise InvariantViolation(
            "transition cannot be partially settled",
            details={"operation": transition.operation, "pending": [e.reason for e in pending]},
        )

    s = transition.state
    state = replace(
        s,
        distributed_accounts=tuple(a for a in s.distributed_accounts if a not in unpaid),
        deposit_legs_paid=tuple(leg for leg in s.deposit_legs_paid if leg not in unpaid_legs),
    )
    log.warning("launchpad: %s settled %d of %d transfers", transition.operation, issued, len(transition.effects))
    return replace(
        transition,
        state=state,
        effects=transition.effects[:issued],
        delta=replace(
            delta,
            recipients_added=tuple(a for a in delta.recipients_added if a not in unpaid),
            deposit_legs_added=tuple(leg for leg in delta.deposit_legs_added if leg not in unpaid_legs),
        ),
    )


__all__ = [
    "Status",
    "LaunchpadState",
    "status",
    "init",
    "deposit",
    "withdraw",
    "claim",
    "claim_individual",
    "distribute_next",
    "distribute_deposits",
    "lock",
    "unlock",
    "admin_withdraw",
    "available_for_claim",
    "available_for_individual_claim",
    "get_investment",
    "user_allocation",
    "remaining_vesting",
    "individual_allocation",
    "individual_remaining_vesting",
    "apply_delta",
    "compensate",
    "settle_partial",
]
