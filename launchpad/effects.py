from __future__ import annotations

"""
Pending effects and reversible deltas.

Every state-machine operation returns a `Transition`: the new snapshot, the
outbound token transfers the caller must issue (`effects`), and the `Delta`
that was applied. Issuing a transfer is the caller's business; if it fails
after the snapshot was committed, `state.compensate(live, transition)` applies
`delta.negate()` to whatever the live state is by then. Only the fields the
operation touched are reverted, so unrelated participants are left alone.
A batch payout whose issuer stopped partway is narrowed to the transfers
that went out by `state.settle_partial`.

Token tags
----------
    "deposit" : the token being raised
    "sale"    : the token being sold
"""


from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .state import LaunchpadState

DEPOSIT_TOKEN = "deposit"
SALE_TOKEN = "sale"

# Transfer reasons of the two deposit-proceeds legs; each is paid at most once.
SOLVER_PROCEEDS = "deposit_distribution"
FEE = "fee"
DEPOSIT_LEGS = (SOLVER_PROCEEDS, FEE)


@dataclass(frozen=True)
class Transfer:
    token: str
    recipient: str
    amount: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "recipient": self.recipient, "amount": self.amount, "reason": self.reason}


def _flip(v: Optional[bool]) -> Optional[bool]:
    return None if v is None else not v


@dataclass(frozen=True)
class Delta:
    """
    Signed changes made by one transition.

    Integer fields are added to the current values; flag fields, when not
    None, are the value the flag was set to. Paired `*_added` / `*_removed`
    tuples list members that entered or left a collection, and swap on
    negation. `accounts_*` hold (depositor, participant) pairs.
    """

    participant: Optional[str] = None
    amount: int = 0
    weight: int = 0
    claimed: int = 0
    individual_claimed: int = 0
    total_deposited: int = 0
    total_sold_tokens: int = 0
    recipients_added: Tuple[str, ...] = ()
    recipients_removed: Tuple[str, ...] = ()
    participants_added: Tuple[str, ...] = ()
    participants_removed: Tuple[str, ...] = ()
    accounts_added: Tuple[Tuple[str, str], ...] = ()
    accounts_removed: Tuple[Tuple[str, str], ...] = ()
    deposit_legs_added: Tuple[str, ...] = ()
    deposit_legs_removed: Tuple[str, ...] = ()
    sale_token_set: Optional[bool] = None
    locked: Optional[bool] = None

    def negate(self) -> "Delta":
        return Delta(
            participant=self.participant,
            amount=-self.amount,
            weight=-self.weight,
            claimed=-self.claimed,
            individual_claimed=-self.individual_claimed,
            total_deposited=-self.total_deposited,
            total_sold_tokens=-self.total_sold_tokens,
            recipients_added=self.recipients_removed,
            recipients_removed=self.recipients_added,
            participants_added=self.participants_removed,
            participants_removed=self.participants_added,
            accounts_added=self.accounts_removed,
            accounts_removed=self.accounts_added,
            deposit_legs_added=self.deposit_legs_removed,
            deposit_legs_removed=self.deposit_legs_added,
            sale_token_set=_flip(self.sale_token_set),
            locked=_flip(self.locked),
        )

    def is_empty(self) -> bool:
        return self == Delta(participant=self.participant)


@dataclass(frozen=True)
class Transition:
    operation: str
    state: "LaunchpadState"
    base_revision: int
    effects: Tuple[Transfer, ...] = ()
    delta: Delta = field(default_factory=Delta)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "base_revision": self.base_revision,
            "revision": self.state.revision,
            "effects": [e.to_dict() for e in self.effects],
        }


@dataclass(frozen=True)
class DepositTransition(Transition):
    accepted: int = 0
    refund: int = 0
    weight_added: int = 0


@dataclass(frozen=True)
class ClaimTransition(Transition):
    amount: int = 0


__all__ = [
    "DEPOSIT_TOKEN",
    "SALE_TOKEN",
    "SOLVER_PROCEEDS",
    "FEE",
    "DEPOSIT_LEGS",
    "Transfer",
    "Delta",
    "Transition",
    "DepositTransition",
    "ClaimTransition",
]
