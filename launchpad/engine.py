from __future__ import annotations

"""
Serialized two-phase launchpad service.

`Launchpad` owns the live snapshot behind a coarse `threading.RLock`, so every
writer sees a consistent set of totals. Each operation runs in two phases:

1) prepare: compute a `Transition` against the current snapshot (pure)
2) commit:  under the lock, check the snapshot has not moved, hand every
            outbound `Transfer` to the issuer, then install the new snapshot

If the issuer raises on the first transfer, nothing is committed. If it raises
partway through a batch payout, only the transfers that went out are
committed (see `state.settle_partial`), so a retry pays the rest and nobody
twice. If a transfer is accepted by the issuer but fails later (an
asynchronous leg), call `compensate(transition)`; it subtracts that
transition's delta from whatever the live state is by then.

Typical flow
~~~~~~~~~~~~
    pad = Launchpad(config, issuer=bank.send)
    pad.deposit("sale-token", config.total_sale_amount, "sale-token")  # funding
    t = pad.deposit("alice", 1_000, "alice")
    ...
    pad.compensate(t)  # bank reported the refund as failed
"""


import logging
import time
from threading import RLock
from typing import Callable, Dict, List, Optional

from . import metrics
from . import state as sm
from .config import EngineSettings, LaunchpadConfig, SaleConfig
from .economics.mechanics import Investment
from .effects import ClaimTransition, DepositTransition, Transfer, Transition
from .errors import LaunchpadError, StaleTransition

log = logging.getLogger(__name__)

EffectIssuer = Callable[[Transfer], None]
Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


class Launchpad:
    """Single-writer wrapper over `launchpad.state`."""

    def __init__(
        self,
        config: SaleConfig,
        *,
        settings: Optional[EngineSettings] = None,
        issuer: Optional[EffectIssuer] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._lock = RLock()
        self._settings = settings or EngineSettings()
        self._settings.validate()
        self._issuer = issuer
        self._clock = clock or _wall_clock
        self._state = sm.init(config)
        self._issued: List[Transfer] = []

    @classmethod
    def from_config(cls, cfg: LaunchpadConfig, **kw) -> "Launchpad":
        return cls(cfg.sale, settings=cfg.engine, **kw)

    # --- views ---

    @property
    def state(self) -> sm.LaunchpadState:
        with self._lock:
            return self._state

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def issued(self) -> List[Transfer]:
        """Transfers handed out so far when no issuer was configured."""
        with self._lock:
            return list(self._issued)

    def _now(self, now: Optional[int]) -> int:
        return self._clock() if now is None else now

    def status(self, now: Optional[int] = None) -> sm.Status:
        st = sm.status(self.state, self._now(now))
        if self._settings.metrics_enabled:
            metrics.set_status(st.value)
        return st

    def get_investment(self, participant: str) -> Optional[Investment]:
        return sm.get_investment(self.state, participant)

    def available_for_claim(self, participant: str, now: Optional[int] = None) -> int:
        return sm.available_for_claim(self.state, participant, self._now(now))

    def user_allocation(self, participant: str) -> int:
        return sm.user_allocation(self.state, participant)

    def remaining_vesting(self, participant: str, now: Optional[int] = None) -> int:
        return sm.remaining_vesting(self.state, participant, self._now(now))

    # --- two-phase core ---

    def prepare(self, operation: Callable[..., Transition], *args, **kwargs) -> Transition:
        """Compute a transition against the current snapshot without committing it."""
        name = getattr(operation, "__name__", "operation")
        snapshot = self.state
        try:
            return operation(snapshot, *args, **kwargs)
        except LaunchpadError as e:
            if self._settings.metrics_enabled:
                metrics.record_rejection(name, e.code)
            log.debug("launchpad: rejected %s: %s", name, e)
            raise

    def commit(self, transition: Transition) -> sm.LaunchpadState:
        with self._lock:
            current = self._state.revision
            if transition.base_revision != current:
                if self._settings.metrics_enabled:
                    metrics.record_stale_commit()
                raise StaleTransition(expected_revision=transition.base_revision, actual_revision=current)

            issued = 0
            try:
                for effect in transition.effects:
                    self._issue(effect)
                    issued += 1
            except Exception:
                if issued:
                    # the first `issued` transfers are out; record exactly those
                    settled = sm.settle_partial(transition, issued)
                    self._state = settled.state
                    if self._settings.metrics_enabled:
                        self._observe(settled)
                raise

            self._state = transition.state
            if self._settings.metrics_enabled:
                self._observe(transition)
            return self._state

    def compensate(self, transition: Transition) -> sm.LaunchpadState:
        with self._lock:
            self._state = sm.compensate(self._state, transition)
            if self._settings.metrics_enabled:
                metrics.record_compensation(transition.operation)
            return self._state

    def _issue(self, effect: Transfer) -> None:
        if self._issuer is None:
            self._issued.append(effect)
            return
        try:
            self._issuer(effect)
        except Exception:
            log.error("launchpad: issuing %s of %d to %s failed",
                      effect.token, effect.amount, effect.recipient)
            raise

    def _observe(self, t: Transition) -> None:
        metrics.record_transition(t.operation)
        if isinstance(t, DepositTransition) and t.operation == "deposit":
            metrics.record_deposit(t.accepted, t.refund)
        elif isinstance(t, ClaimTransition):
            metrics.record_claim(t.amount, "individual" if t.operation == "claim_individual" else "participant")
        elif t.operation == "withdraw":
            metrics.record_withdraw(sum(e.amount for e in t.effects))
        elif t.operation == "distribute":
            metrics.record_distribution(len(t.delta.recipients_added))

    def _run(self, operation: Callable[..., Transition], *args, **kwargs) -> Transition:
        with self._lock:
            t = self.prepare(operation, *args, **kwargs)
            self.commit(t)
            return t

    # --- operations ---

    def deposit(
        self,
        depositor: str,
        amount: int,
        participant: str,
        now: Optional[int] = None,
        *,
        token: Optional[str] = None,
    ) -> DepositTransition:
        return self._run(sm.deposit, depositor, amount, participant, self._now(now), token=token)  # type: ignore[return-value]

    def withdraw(self, participant: str, amount: int, now: Optional[int] = None) -> Transition:
        return self._run(sm.withdraw, participant, amount, self._now(now))

    def claim(self, participant: str, now: Optional[int] = None) -> ClaimTransition:
        return self._run(sm.claim, participant, self._now(now))  # type: ignore[return-value]

    def claim_individual(self, stakeholder: str, now: Optional[int] = None) -> ClaimTransition:
        return self._run(sm.claim_individual, stakeholder, self._now(now))  # type: ignore[return-value]

    def distribute_next(self, now: Optional[int] = None, *, limit: Optional[int] = None) -> Transition:
        if limit is None:
            limit = self._settings.distribution_batch_limit
        return self._run(sm.distribute_next, self._now(now), limit=limit)

    def distribute_deposits(self, now: Optional[int] = None) -> Transition:
        return self._run(sm.distribute_deposits, self._now(now))

    def lock(self, now: Optional[int] = None) -> Transition:
        return self._run(sm.lock, self._now(now))

    def unlock(self) -> Transition:
        return self._run(sm.unlock)

    def admin_withdraw(self, token: str, recipient: str, amount: int, now: Optional[int] = None) -> Transition:
        return self._run(sm.admin_withdraw, token, recipient, amount, self._now(now))

    def snapshot(self) -> Dict[str, object]:
        return self.state.to_dict()


__all__ = ["Launchpad", "EffectIssuer", "Clock"]
