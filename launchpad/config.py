from __future__ import annotations
"""
launchpad.config — sale configuration and engine settings

Covers:
- The immutable per-sale parameters (`SaleConfig`): tokens, time window,
  soft/hard caps, mechanic, discount schedule, vesting and distribution plan
- Runtime knobs for the serialized engine (`EngineSettings`)

A sale file is JSON or YAML:

  deposit_token: usdc
  sale_token: sale
  start_time: "2026-01-01T00:00:00Z"     # int seconds or ISO-8601
  end_time: 1767312000
  soft_cap: 100000
  mechanic: {fixed_price: {deposit_unit: 1, sale_unit: 1}}
  sale_amount: 200000
  total_sale_amount: 200000
  discounts: [{start_time: .., end_time: .., percentage: 1000}]
  vesting: {cliff_period: 86400, vesting_period: 604800}
  tge: "2026-02-01T00:00:00Z"            # optional; vesting starts here instead of end_time
  distribution:
    solver_account: solver
    solver_allocation: 0
    stakeholders: [{account: team, allocation: 5000}]
  engine:                                 # optional EngineSettings
    distribution_batch_limit: 7

Environment overrides for the engine (all optional):

  LAUNCHPAD_DISTRIBUTION_BATCH_LIMIT=7
  LAUNCHPAD_METRICS_ENABLED=1

`LAUNCHPAD_CONFIG_FILE=/path/to/sale.(json|yaml|yml)` selects the file used by
`load()`. Environment overrides the file's engine section.
"""


from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple
import json
import os
from pathlib import Path

import yaml

from .economics.claim import VestingSchedule
from .economics.discount import Discount, validate_schedule
from .economics.distribution import DistributionPlan
from .economics.mechanics import Mechanic, mechanic_from_dict
from .economics.scaling import U128_MAX
from .errors import ConfigError


# -------------------------- Data classes --------------------------


@dataclass(frozen=True)
class SaleConfig:
    """Read-only context threaded through every launchpad operation."""
    deposit_token: str
    sale_token: str
    start_time: int
    end_time: int
    soft_cap: int
    mechanic: Mechanic
    sale_amount: int
    total_sale_amount: int
    vesting: Optional[VestingSchedule] = None
    distribution: Optional[DistributionPlan] = None
    discounts: Tuple[Discount, ...] = field(default_factory=tuple)
    min_deposit: int = 0
    tge: Optional[int] = None

    def reserved_amount(self) -> int:
        return self.distribution.reserved_total() if self.distribution else 0

    def vesting_start(self) -> int:
        """Anchor of the participants' release curve: the TGE when set, else the sale end."""
        return self.end_time if self.tge is None else self.tge

    def validate(self) -> None:
        if not self.deposit_token or not self.sale_token:
            raise ConfigError("deposit_token and sale_token are required", field="deposit_token")
        for name in ("start_time", "end_time", "soft_cap", "sale_amount", "total_sale_amount", "min_deposit"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int) or not (0 <= v <= U128_MAX):
                raise ConfigError(f"{name} must be a non-negative u128 integer", field=name, details={name: v})
        if self.start_time >= self.end_time:
            raise ConfigError(
                "start_time must be before end_time",
                field="start_time",
                details={"start_time": self.start_time, "end_time": self.end_time},
            )
        if self.sale_amount == 0:
            raise ConfigError("sale_amount must be positive", field="sale_amount")
        tge = self.tge
        if tge is not None and (isinstance(tge, bool) or not isinstance(tge, int) or tge <= self.end_time):
            raise ConfigError(
                "tge must be after end_time",
                field="tge",
                details={"tge": self.tge, "end_time": self.end_time},
            )

        self.mechanic.validate()
        validate_schedule(self.discounts)
        if self.vesting is not None:
            self.vesting.validate()
        if self.distribution is not None:
            self.distribution.validate()

        expected = self.sale_amount + self.reserved_amount()
        if self.total_sale_amount != expected:
            raise ConfigError(
                "total_sale_amount must equal sale_amount plus all reserved allocations",
                field="total_sale_amount",
                details={"total_sale_amount": self.total_sale_amount, "expected": expected},
            )

    def is_valid(self) -> bool:
        try:
            self.validate()
        except ConfigError:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deposit_token": self.deposit_token,
            "sale_token": self.sale_token,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "soft_cap": self.soft_cap,
            "mechanic": self.mechanic.to_dict(),
            "sale_amount": self.sale_amount,
            "total_sale_amount": self.total_sale_amount,
            "vesting": self.vesting.to_dict() if self.vesting else None,
            "distribution": self.distribution.to_dict() if self.distribution else None,
            "discounts": [d.to_dict() for d in self.discounts],
            "min_deposit": self.min_deposit,
            "tge": self.tge,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "SaleConfig":
        try:
            vesting = data.get("vesting")
            dist = data.get("distribution")
            tge = data.get("tge")
            discounts = tuple(
                Discount(
                    start_time=parse_time(d["start_time"]),
                    end_time=parse_time(d["end_time"]),
                    percentage=int(d["percentage"]),
                )
                for d in (data.get("discounts") or ())
            )
            cfg = SaleConfig(
                deposit_token=str(data["deposit_token"]),
                sale_token=str(data["sale_token"]),
                start_time=parse_time(data["start_time"]),
                end_time=parse_time(data["end_time"]),
                soft_cap=int(data.get("soft_cap", 0)),
                mechanic=mechanic_from_dict(data["mechanic"]),
                sale_amount=int(data["sale_amount"]),
                total_sale_amount=int(data["total_sale_amount"]),
                vesting=VestingSchedule.from_dict(vesting) if vesting else None,
                distribution=DistributionPlan.from_dict(dist) if dist else None,
                discounts=discounts,
                min_deposit=int(data.get("min_deposit", 0)),
                tge=parse_time(tge) if tge is not None else None,
            )
        except KeyError as e:
            raise ConfigError(f"missing required field {e.args[0]!r}", field=str(e.args[0])) from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"malformed sale configuration: {e}") from e
        cfg.validate()
        return cfg


@dataclass
class EngineSettings:
    """Knobs for `launchpad.engine.Launchpad`."""
    distribution_batch_limit: Optional[int] = None  # None = pay everyone in one batch
    metrics_enabled: bool = True

    def validate(self) -> None:
        if self.distribution_batch_limit is not None and self.distribution_batch_limit <= 0:
            raise ConfigError(
                "distribution_batch_limit must be positive",
                field="distribution_batch_limit",
                details={"distribution_batch_limit": self.distribution_batch_limit},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distribution_batch_limit": self.distribution_batch_limit,
            "metrics_enabled": self.metrics_enabled,
        }


@dataclass
class LaunchpadConfig:
    """Top-level configuration container."""
    sale: SaleConfig
    engine: EngineSettings = field(default_factory=EngineSettings)

    def validate(self) -> None:
        self.sale.validate()
        self.engine.validate()

    def to_dict(self) -> Dict[str, Any]:
        return {"sale": self.sale.to_dict(), "engine": self.engine.to_dict()}


# -------------------------- Loaders --------------------------


def parse_time(v: Any) -> int:
    """Seconds since the epoch from an int or an ISO-8601 string/datetime (naive = UTC)."""
    if isinstance(v, bool):
        raise ConfigError(f"invalid time value {v!r}")
    if isinstance(v, int):
        return v
    if isinstance(v, datetime):
        dt = v
    elif isinstance(v, str):
        s = v.strip()
        if s.lstrip("-").isdigit():
            return int(s)
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError as e:
            raise ConfigError(f"invalid ISO-8601 time {v!r}") from e
    else:
        raise ConfigError(f"invalid time value {v!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def _getenv_int(name: str, default: Optional[int]) -> Optional[int]:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except Exception as e:
        raise ConfigError(f"Invalid int for {name}: {v!r}") from e


def _getenv_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    s = v.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"Invalid bool for {name}: {v!r}")


def from_env(base: Optional[EngineSettings] = None, prefix: str = "LAUNCHPAD_") -> EngineSettings:
    """
    Build EngineSettings from environment variables, optionally layering on top of `base`.
    """
    cfg = base or EngineSettings()
    settings = EngineSettings(
        distribution_batch_limit=_getenv_int(f"{prefix}DISTRIBUTION_BATCH_LIMIT", cfg.distribution_batch_limit),
        metrics_enabled=_getenv_bool(f"{prefix}METRICS_ENABLED", cfg.metrics_enabled),
    )
    settings.validate()
    return settings


def _read_mapping(path: str | os.PathLike[str]) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")
    if not isinstance(data, dict):
        raise ConfigError(f"{p} must contain a mapping at the top level")
    return data


def from_file(path: str | os.PathLike[str]) -> LaunchpadConfig:
    """
    Load a sale (and optional `engine` section) from a JSON or YAML file.
    """
    data = _read_mapping(path)
    engine = data.pop("engine", None) or {}
    limit = engine.get("distribution_batch_limit")
    cfg = LaunchpadConfig(
        sale=SaleConfig.from_dict(data),
        engine=EngineSettings(
            distribution_batch_limit=int(limit) if limit is not None else None,
            metrics_enabled=bool(engine.get("metrics_enabled", True)),
        ),
    )
    cfg.validate()
    return cfg


def load(path: Optional[str | os.PathLike[str]] = None) -> LaunchpadConfig:
    """
    Load configuration using the following precedence:
      1) File at `path` or $LAUNCHPAD_CONFIG_FILE (JSON/YAML)
      2) Environment variables (LAUNCHPAD_*), applied on top of the file's engine section
    """
    file_path = path or os.getenv("LAUNCHPAD_CONFIG_FILE")
    if not file_path:
        raise ConfigError("no sale configuration file given (set LAUNCHPAD_CONFIG_FILE)")
    cfg = from_file(file_path)
    return LaunchpadConfig(sale=cfg.sale, engine=from_env(base=cfg.engine))


# -------------------------- Utilities --------------------------


def pretty(cfg: LaunchpadConfig | SaleConfig) -> str:
    """Return a human-readable JSON string of a config."""
    return json.dumps(cfg.to_dict(), indent=2, sort_keys=True)


__all__ = [
    "SaleConfig",
    "EngineSettings",
    "LaunchpadConfig",
    "parse_time",
    "from_env",
    "from_file",
    "load",
    "pretty",
]
