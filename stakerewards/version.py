from __future__ import annotations

"""
Package version.

Resolution order:
  1) STAKEREWARDS_VERSION from the environment (release pipelines pin it here)
  2) the installed distribution's metadata
  3) BASE_VERSION, with a PEP 440 local tag from `git describe` when the
     source tree is a git checkout, e.g. ``0.1.0+gabc1234.dirty``
"""

import os
import re
import subprocess
from importlib import metadata
from typing import Optional

BASE_VERSION = "0.1.0"
DIST_NAME = "stakerewards"

_LOCAL_UNSAFE = re.compile(r"[^0-9A-Za-z]+")


def _describe() -> Optional[str]:
    here = os.path.dirname(os.path.abspath(__file__))
    try:
        raw = subprocess.check_output(
            ["git", "describe", "--tags", "--always", "--dirty"],
            cwd=here,
            stderr=subprocess.DEVNULL,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return raw.decode("utf-8", "replace").strip() or None


def local_tag(describe: str) -> str:
    """'v0.1.0-3-gabc1234-dirty' -> 'gabc1234.dirty'."""
    parts = [p for p in _LOCAL_UNSAFE.split(describe) if p]
    # drop a leading release tag; the base version already carries it
    while parts and (parts[0].lstrip("v").isdigit()):
        parts.pop(0)
    tag = ".".join(parts) or "git"
    return tag if tag[0].isalpha() else f"g{tag}"


def build_version() -> str:
    pinned = os.getenv("STAKEREWARDS_VERSION")
    if pinned:
        return pinned
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        pass
    desc = _describe()
    return f"{BASE_VERSION}+{local_tag(desc)}" if desc else BASE_VERSION


__version__ = build_version()

__all__ = ["__version__", "BASE_VERSION", "build_version", "local_tag"]
