from __future__ import annotations
"""
launchpad — computational core of a token-sale engine.

Tracks deposits and withdrawals, converts them into sale-token allocations
under a fixed-price or price-discovery mechanic, applies time-bounded deposit
bonuses, caps issuance with safe partial refunds, releases allocations under
optional vesting, and distributes reserved allocations after the sale.

Public surface (lazily loaded):
- config, errors, metrics, effects
- economics, state, engine
"""


from typing import List

from .version import __version__

__all__: List[str] = [
    "__version__",
    # lazily importable subpackages/modules
    "config",
    "errors",
    "metrics",
    "effects",
    "economics",
    "state",
    "engine",
]

# --- Lazy module loader (PEP 562) -------------------------------------------------
import importlib


_lazy_modules = set(__all__) - {"__version__"}


def __getattr__(name: str):
    if name in _lazy_modules:
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(set(globals().keys()) | _lazy_modules)


def get_version() -> str:
    """Return the launchpad package version string."""
    return __version__
