"""Token parsing utilities for package specifiers and versions."""

import re
from typing import Optional, Tuple

import semantic_version

from errors import VersionUnparseable

from .models import InstallSpec

_VERSION_RUN = re.compile(r"(?<![\d.])(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def tokenize_rightmost_at(s: str) -> Tuple[str, Optional[str]]:
    """Return (name, range or None) using the rightmost-``@`` rule.

    A leading ``@`` belongs to a scoped name (``@scope/pkg``) and is never
    treated as the separator.
    """
    s = s.strip()
    idx = s.rfind('@')
    if idx <= 0:
        return s, None
    name = s[:idx].strip()
    spec = s[idx + 1:].strip()
    return name, (spec or None)


def parse_install_spec(token: str) -> InstallSpec:
    """Parse ``name@range`` (or a bare name) into an InstallSpec."""
    name, spec = tokenize_rightmost_at(token)
    if not name:
        raise ValueError(f"Empty package name in {token!r}")
    if spec is not None and len(spec) >= 2 and spec[0] == spec[-1] and spec[0] in "\"'":
        spec = spec[1:-1]
    return InstallSpec(name=name, range=spec)


def coerce_version(value: Optional[str]) -> Optional[semantic_version.Version]:
    """Coerce a loosely formatted version string to the nearest semantic version.

    Exact versions (optionally prefixed with ``v`` or ``=``) are kept as-is,
    prerelease included. Anything else falls back to the first
    ``major[.minor[.patch]]`` run found in the string, with missing parts
    zero-filled. Returns None when no such run exists.
    """
    if value is None:
        return None
    s = value.strip()
    stripped = s.lstrip('=v').strip()
    try:
        return semantic_version.Version(stripped)
    except ValueError:
        pass
    m = _VERSION_RUN.search(s)
    if not m:
        return None
    major, minor, patch = m.group(1), m.group(2) or "0", m.group(3) or "0"
    return semantic_version.Version(major=int(major), minor=int(minor), patch=int(patch))


def parse_version(value: Optional[str]) -> semantic_version.Version:
    """Like ``coerce_version`` but raises when nothing can be coerced.

    Raises:
        VersionUnparseable: If ``value`` holds no recognizable version.
    """
    version = coerce_version(value)
    if version is None:
        raise VersionUnparseable(value or "")
    return version
