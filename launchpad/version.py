from __future__ import annotations

"""
launchpad.version — semantic version string with optional git-describe suffix.

Rules:
- BASE_VERSION is the semver for this package.
- If LAUNCHPAD_VERSION is set in the environment, that wins.
- Inside a git checkout, a PEP 440 local suffix derived from
  `git describe --tags --dirty --always --abbrev=7` is appended, e.g.
    0.1.0+g1a2b3c4.dirty
- Without git, BASE_VERSION is used as is.
"""


import os
import re
import subprocess
from typing import Optional

# Bump this on intentional releases.
BASE_VERSION = "0.1.0"

_LOCAL_UNSAFE = re.compile(r"[^a-zA-Z0-9.]+")


def _git_describe() -> Optional[str]:
    try:
        out = subprocess.check_output(
            ["git", "describe", "--tags", "--dirty", "--always", "--abbrev=7"],
            stderr=subprocess.DEVNULL,
            cwd=os.path.dirname(os.path.abspath(__file__)),
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode("utf-8", "replace").strip() or None


def local_suffix(desc: str) -> str:
    """
    Turn a `git describe` string into a PEP 440 local segment:
    separators become dots, a leading 'v' before a digit is dropped.
    """
    s = desc.replace("-", ".").replace("+", ".")
    if s.startswith("v") and len(s) > 1 and s[1].isdigit():
        s = s[1:]
    s = _LOCAL_UNSAFE.sub(".", s)
    return re.sub(r"\.{2,}", ".", s).strip(".")


def build_version() -> str:
    env = os.getenv("LAUNCHPAD_VERSION")
    if env:
        return env
    desc = _git_describe()
    if not desc:
        return BASE_VERSION
    return f"{BASE_VERSION}+{local_suffix(desc)}"


__version__ = build_version()


def get_version() -> str:
    return __version__


__all__ = ["__version__", "get_version", "BASE_VERSION", "local_suffix"]
