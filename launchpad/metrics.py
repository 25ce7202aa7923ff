from __future__ import annotations

"""
Prometheus metrics for the launchpad engine.

We expose counters covering:
- deposits: accepted / refunded amounts and fully refunded deposits
- withdrawals and claims (participant and individual vesting)
- distribution batches and deposit-proceeds forwarding
- compensations and stale commits
- the last observed lifecycle status (gauge, one-hot by label)

Amounts are raw integer base units; counters accept them as floats.
"""


from typing import Iterable, Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

# Use a dedicated registry so embedding apps can choose to merge or expose it directly.
REGISTRY = CollectorRegistry()

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   operation: "deposit" | "withdraw" | "claim" | "claim_individual" | "distribute" | ...
#   status: "not_initialized" | "locked" | "not_started" | "ongoing" | "pre_tge" | "success" | "failed"
# ────────────────────────────────────────────────────────────────────────────────

TRANSITIONS = Counter(
    "launchpad_transitions_total",
    "Committed transitions by operation.",
    labelnames=("operation",),
    registry=REGISTRY,
)

REJECTIONS = Counter(
    "launchpad_rejections_total",
    "Operations rejected before producing a state, by operation and error code.",
    labelnames=("operation", "code"),
    registry=REGISTRY,
)

DEPOSITED_AMOUNT = Counter(
    "launchpad_deposited_amount_total",
    "Deposit-token base units accepted into the sale.",
    registry=REGISTRY,
)

REFUNDED_AMOUNT = Counter(
    "launchpad_refunded_amount_total",
    "Deposit-token base units refunded because the cap was reached.",
    registry=REGISTRY,
)

WITHDRAWN_AMOUNT = Counter(
    "launchpad_withdrawn_amount_total",
    "Deposit-token base units withdrawn by participants.",
    registry=REGISTRY,
)

CLAIMED_AMOUNT = Counter(
    "launchpad_claimed_amount_total",
    "Sale-token base units released by claims, by kind.",
    labelnames=("kind",),  # kind: "participant" | "individual"
    registry=REGISTRY,
)

DISTRIBUTED_RECIPIENTS = Counter(
    "launchpad_distributed_recipients_total",
    "Recipients paid by distribution batches.",
    registry=REGISTRY,
)

COMPENSATIONS = Counter(
    "launchpad_compensations_total",
    "Transitions undone after their transfers failed, by operation.",
    labelnames=("operation",),
    registry=REGISTRY,
)

STALE_COMMITS = Counter(
    "launchpad_stale_commits_total",
    "Commits refused because the snapshot changed underneath.",
    registry=REGISTRY,
)

STATUS = Gauge(
    "launchpad_status",
    "Last observed lifecycle status (1 for the current status, 0 otherwise).",
    labelnames=("status",),
    registry=REGISTRY,
)

_STATUSES = ("not_initialized", "locked", "not_started", "ongoing", "pre_tge", "success", "failed")


# ────────────────────────────────────────────────────────────────────────────────
# Recording helpers
# ────────────────────────────────────────────────────────────────────────────────


def record_transition(operation: str) -> None:
    TRANSITIONS.labels(operation=operation).inc()


def record_rejection(operation: str, code: str) -> None:
    REJECTIONS.labels(operation=operation, code=code).inc()


def record_deposit(accepted: int, refund: int) -> None:
    """Observe one deposit's accepted and refunded parts."""
    if accepted > 0:
        DEPOSITED_AMOUNT.inc(float(accepted))
    if refund > 0:
        REFUNDED_AMOUNT.inc(float(refund))


def record_withdraw(amount: int) -> None:
    if amount > 0:
        WITHDRAWN_AMOUNT.inc(float(amount))


def record_claim(amount: int, kind: str = "participant") -> None:
    if amount > 0:
        CLAIMED_AMOUNT.labels(kind=kind).inc(float(amount))


def record_distribution(recipients: int) -> None:
    DISTRIBUTED_RECIPIENTS.inc(recipients)


def record_compensation(operation: str) -> None:
    COMPENSATIONS.labels(operation=operation).inc()


def record_stale_commit() -> None:
    STALE_COMMITS.inc()


def set_status(status: str, statuses: Iterable[str] = _STATUSES) -> None:
    """One-hot the status gauge."""
    for s in statuses:
        STATUS.labels(status=s).set(1 if s == status else 0)


def render(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Prometheus text exposition of `registry` (default: the launchpad registry)."""
    return generate_latest(registry or REGISTRY)


__all__ = [
    "REGISTRY",
    "CONTENT_TYPE_LATEST",
    "TRANSITIONS",
    "REJECTIONS",
    "DEPOSITED_AMOUNT",
    "REFUNDED_AMOUNT",
    "WITHDRAWN_AMOUNT",
    "CLAIMED_AMOUNT",
    "DISTRIBUTED_RECIPIENTS",
    "COMPENSATIONS",
    "STALE_COMMITS",
    "STATUS",
    "record_transition",
    "record_rejection",
    "record_deposit",
    "record_withdraw",
    "record_claim",
    "record_distribution",
    "record_compensation",
    "record_stale_commit",
    "set_status",
    "render",
]
