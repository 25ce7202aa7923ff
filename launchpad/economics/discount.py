from __future__ import annotations

"""
Time-indexed deposit bonuses.

A discount is a percentage bonus (basis points, 10_000 = 100%) added to a
deposit's weight while `start_time <= t < end_time`. A schedule is an ordered
sequence of discounts whose active intervals never overlap, so at most one
entry is active at any instant and lookup is a plain linear scan.

    apply_discount(s, amount, t)    = floor(amount * (10_000 + pct) / 10_000)
    revert_discount(s, weighted, t) = floor(weighted * 10_000 / (10_000 + pct))

Both return their input unchanged when nothing is active. Because they are
built on `scaling.scale` / `scaling.revert`, apply is non-decreasing and never
below its input, and revert(apply(x)) <= x.
"""


from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigError
from .scaling import BPS_DEN, revert, scale

MAX_PERCENTAGE = 10_000


@dataclass(frozen=True)
class Discount:
    """
    One bonus window.

    Attributes
    ----------
    start_time : int
        First instant (inclusive) the bonus applies.
    end_time : int
        First instant (exclusive) the bonus no longer applies.
    percentage : int
        Bonus in basis points, 1..10_000.
    """

    start_time: int
    end_time: int
    percentage: int

    def validate(self) -> None:
        if not isinstance(self.percentage, int) or not (0 < self.percentage <= MAX_PERCENTAGE):
            raise ConfigError(
                "discount percentage must be within 1..10000",
                field="percentage",
                details={"percentage": self.percentage},
            )
        if self.start_time >= self.end_time:
            raise ConfigError(
                "discount start_time must be before end_time",
                field="start_time",
                details={"start_time": self.start_time, "end_time": self.end_time},
            )

    def is_active(self, t: int) -> bool:
        return self.start_time <= t < self.end_time

    def to_dict(self) -> Dict[str, int]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "percentage": self.percentage,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Discount":
        return Discount(
            start_time=int(d["start_time"]),
            end_time=int(d["end_time"]),
            percentage=int(d["percentage"]),
        )


def schedule_overlaps(schedule: Sequence[Discount]) -> List[Tuple[int, int]]:
    """Return index pairs (i, j), i < j, whose [start, end) intervals intersect."""
    pairs: List[Tuple[int, int]] = []
    for i, a in enumerate(schedule):
        for j in range(i + 1, len(schedule)):
            b = schedule[j]
            if a.start_time < b.end_time and b.start_time < a.end_time:
                pairs.append((i, j))
    return pairs


def validate_schedule(schedule: Iterable[Discount]) -> None:
    items = tuple(schedule)
    for d in items:
        d.validate()
    overlaps = schedule_overlaps(items)
    if overlaps:
        raise ConfigError(
            "discount windows must not overlap",
            field="discounts",
            details={"overlapping": [list(p) for p in overlaps]},
        )


def find_active(schedule: Sequence[Discount], t: int) -> Optional[Discount]:
    for d in schedule:
        if d.is_active(t):
            return d
    return None


def apply_discount(schedule: Sequence[Discount], amount: int, t: int) -> int:
    """Bonus-adjusted weight of `amount` deposited at `t`."""
    active = find_active(schedule, t)
    if active is None:
        return scale(amount, 1, 1)
    return scale(amount, BPS_DEN + active.percentage, BPS_DEN)


def revert_discount(schedule: Sequence[Discount], weighted: int, t: int) -> int:
    """Deposit amount that a bonus-adjusted `weighted` corresponds to at `t`."""
    active = find_active(schedule, t)
    if active is None:
        return scale(weighted, 1, 1)
    return revert(weighted, BPS_DEN + active.percentage, BPS_DEN)


__all__ = [
    "MAX_PERCENTAGE",
    "Discount",
    "schedule_overlaps",
    "validate_schedule",
    "find_active",
    "apply_discount",
    "revert_discount",
]
