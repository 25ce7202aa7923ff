from __future__ import annotations

"""
Sale mechanics and the per-participant investment record.

A mechanic is a small tagged variant:

- `FixedPrice(deposit_unit, sale_unit)` sells `sale_unit` sale tokens for every
  `deposit_unit` deposit tokens and caps issuance at the sale amount.
- `PRICE_DISCOVERY` defers pricing to the final ratio of sale amount to total
  weight and is uncapped.

Workflows branch on the tag once, at their entry point, via `is_fixed_price`.
"""


from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Union

from ..errors import ConfigError
from .scaling import U128_MAX, revert, scale


@dataclass(frozen=True)
class FixedPrice:
    deposit_unit: int
    sale_unit: int

    kind = "fixed_price"

    def validate(self) -> None:
        for name, v in (("deposit_unit", self.deposit_unit), ("sale_unit", self.sale_unit)):
            if not isinstance(v, int) or not (0 < v <= U128_MAX):
                raise ConfigError(f"{name} must be a positive integer", field=name, details={name: v})

    def to_sale_tokens(self, weight: int) -> int:
        """Sale tokens bought by `weight` deposit units."""
        return scale(weight, self.sale_unit, self.deposit_unit)

    def to_deposit_units(self, assets: int) -> int:
        """Deposit units worth `assets` sale tokens (rounded down)."""
        return revert(assets, self.sale_unit, self.deposit_unit)

    def to_dict(self) -> Dict[str, Any]:
        return {"fixed_price": {"deposit_unit": self.deposit_unit, "sale_unit": self.sale_unit}}


@dataclass(frozen=True)
class PriceDiscovery:
    kind = "price_discovery"

    def validate(self) -> None:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"price_discovery": {}}


PRICE_DISCOVERY = PriceDiscovery()

Mechanic = Union[FixedPrice, PriceDiscovery]


def is_fixed_price(mechanic: Mechanic) -> bool:
    return isinstance(mechanic, FixedPrice)


def mechanic_from_dict(d: Any) -> Mechanic:
    """
    Accepts `"price_discovery"`, `{"price_discovery": {}}` or
    `{"fixed_price": {"deposit_unit": .., "sale_unit": ..}}`.
    """
    if isinstance(d, str):
        if d.lower() in ("price_discovery", "pricediscovery"):
            return PRICE_DISCOVERY
        raise ConfigError(f"unknown mechanic {d!r}", field="mechanic")
    if isinstance(d, Mapping):
        if "fixed_price" in d:
            fp = d["fixed_price"] or {}
            return FixedPrice(deposit_unit=int(fp["deposit_unit"]), sale_unit=int(fp["sale_unit"]))
        if "price_discovery" in d:
            return PRICE_DISCOVERY
    raise ConfigError(f"unknown mechanic {d!r}", field="mechanic")


@dataclass(frozen=True)
class Investment:
    """
    One participant's position.

    amount  : contributed principal still held by the sale (deposit units)
    weight  : bonus-adjusted contribution; sale tokens under FixedPrice
    claimed : sale tokens released so far (never decreases)
    """

    amount: int = 0
    weight: int = 0
    claimed: int = 0

    def with_changes(self, **kw: int) -> "Investment":
        return replace(self, **kw)

    def to_dict(self) -> Dict[str, int]:
        return {"amount": self.amount, "weight": self.weight, "claimed": self.claimed}

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Investment":
        return Investment(
            amount=int(d.get("amount", 0)),
            weight=int(d.get("weight", 0)),
            claimed=int(d.get("claimed", 0)),
        )


__all__ = [
    "FixedPrice",
    "PriceDiscovery",
    "PRICE_DISCOVERY",
    "Mechanic",
    "is_fixed_price",
    "mechanic_from_dict",
    "Investment",
]
