from __future__ import annotations

"""
Post-sale payout of reserved allocations.

The plan names one solver recipient plus an ordered list of stakeholders.
Payouts go out in batches; a running log of recipients already paid makes the
process idempotent:

    pending = [solver if not logged] + [stakeholders not logged, plan order]

Stakeholders with an individual vesting schedule are excluded from batches and
claim through the individual vesting curve instead. Zero allocations are
never paid.

The optional `deposits` split forwards shares (bps) of the raised deposit
tokens to the solver and a fee account after a successful sale.
"""


from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigError, InvalidAmount
from .claim import VestingSchedule
from .scaling import BPS_DEN, apply_bps


@dataclass(frozen=True)
class Stakeholder:
    account: str
    allocation: int
    vesting: Optional[VestingSchedule] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account,
            "allocation": self.allocation,
            "vesting": self.vesting.to_dict() if self.vesting else None,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Stakeholder":
        v = d.get("vesting")
        return Stakeholder(
            account=str(d["account"]),
            allocation=int(d["allocation"]),
            vesting=VestingSchedule.from_dict(v) if v else None,
        )


@dataclass(frozen=True)
class DepositSplit:
    """Shares of raised deposit tokens forwarded after success (bps)."""
    solver_percentage: int
    fee_account: str
    fee_percentage: int

    def validate(self) -> None:
        for name, v in (("solver_percentage", self.solver_percentage), ("fee_percentage", self.fee_percentage)):
            if not (0 <= v <= BPS_DEN):
                raise ConfigError(f"{name} must be within 0..10000", field=name, details={name: v})
        if self.solver_percentage + self.fee_percentage > BPS_DEN:
            raise ConfigError(
                "solver_percentage + fee_percentage must not exceed 10000",
                field="deposits",
                details={"solver_percentage": self.solver_percentage, "fee_percentage": self.fee_percentage},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "solver_percentage": self.solver_percentage,
            "fee_account": self.fee_account,
            "fee_percentage": self.fee_percentage,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "DepositSplit":
        return DepositSplit(
            solver_percentage=int(d.get("solver_percentage", 0)),
            fee_account=str(d["fee_account"]),
            fee_percentage=int(d.get("fee_percentage", 0)),
        )


@dataclass(frozen=True)
class DistributionPlan:
    solver_account: str
    solver_allocation: int = 0
    stakeholders: Tuple[Stakeholder, ...] = field(default_factory=tuple)
    deposits: Optional[DepositSplit] = None

    def reserved_total(self) -> int:
        return self.solver_allocation + sum(s.allocation for s in self.stakeholders)

    def validate(self) -> None:
        if not self.solver_account:
            raise ConfigError("solver_account is required", field="solver_account")
        if self.solver_allocation < 0:
            raise ConfigError("solver_allocation must be non-negative", field="solver_allocation")
        seen = {self.solver_account}
        for s in self.stakeholders:
            if s.allocation < 0:
                raise ConfigError(
                    "stakeholder allocation must be non-negative",
                    field="stakeholders",
                    details={"account": s.account},
                )
            if s.account in seen:
                raise ConfigError(
                    "distribution recipients must be distinct",
                    field="stakeholders",
                    details={"account": s.account},
                )
            seen.add(s.account)
            if s.vesting is not None:
                s.vesting.validate()
        if self.deposits is not None:
            self.deposits.validate()

    def vested_stakeholder(self, account: str) -> Optional[Stakeholder]:
        for s in self.stakeholders:
            if s.account == account and s.vesting is not None:
                return s
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "solver_account": self.solver_account,
            "solver_allocation": self.solver_allocation,
            "stakeholders": [s.to_dict() for s in self.stakeholders],
            "deposits": self.deposits.to_dict() if self.deposits else None,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "DistributionPlan":
        dep = d.get("deposits")
        return DistributionPlan(
            solver_account=str(d["solver_account"]),
            solver_allocation=int(d.get("solver_allocation", 0)),
            stakeholders=tuple(Stakeholder.from_dict(s) for s in d.get("stakeholders", ()) or ()),
            deposits=DepositSplit.from_dict(dep) if dep else None,
        )


def pending_recipients(
    plan: DistributionPlan,
    distributed: Sequence[str],
    *,
    limit: Optional[int] = None,
) -> List[Tuple[str, int]]:
    """
    Next batch of (recipient, allocation) not yet in `distributed`.

    Recipients with a zero allocation are never pending.
    """
    if limit is not None and limit <= 0:
        raise InvalidAmount("distribution batch limit must be positive", amount=limit)
    done = set(distributed)
    batch: List[Tuple[str, int]] = []
    if plan.solver_account not in done and plan.solver_allocation > 0:
        batch.append((plan.solver_account, plan.solver_allocation))
    for s in plan.stakeholders:
        if s.vesting is None and s.allocation > 0 and s.account not in done:
            batch.append((s.account, s.allocation))
    if limit is not None:
        batch = batch[:limit]
    return batch


def record_batch(distributed: Sequence[str], batch: Sequence[Tuple[str, int]]) -> Tuple[str, ...]:
    """Append unseen recipients of `batch`; an empty or repeated batch is a no-op."""
    log = list(distributed)
    seen = set(log)
    for account, _ in batch:
        if account not in seen:
            log.append(account)
            seen.add(account)
    return tuple(log)


def split_deposits(split: Optional[DepositSplit], total_deposited: int) -> Tuple[int, int]:
    """(solver_amount, fee_amount) owed from `total_deposited`."""
    if split is None:
        return 0, 0
    return (
        apply_bps(total_deposited, split.solver_percentage),
        apply_bps(total_deposited, split.fee_percentage),
    )


__all__ = [
    "Stakeholder",
    "DepositSplit",
    "DistributionPlan",
    "pending_recipients",
    "record_batch",
    "split_deposits",
]
