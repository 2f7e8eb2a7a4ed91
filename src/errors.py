"""Exception hierarchy for peer dependency analysis and fixing."""

from __future__ import annotations

from typing import List, Optional


class PeerFixError(Exception):
    """Base class for all errors raised by PeerFix."""


class ManifestUnreadable(PeerFixError):
    """The project manifest is missing or cannot be parsed. Fatal."""

    def __init__(self, path: Optional[str], reason: str):
        self.path = path
        self.reason = reason
        where = path or "<manifest>"
        super().__init__(f"Cannot read manifest {where}: {reason}")


class MetadataUnavailable(PeerFixError):
    """Peer metadata for a single package could not be fetched.

    Raised by metadata sources; the catalog degrades the package to an empty
    peer set instead of propagating it.
    """

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Peer metadata unavailable for {name}: {reason}")


class MetadataNotFound(MetadataUnavailable):
    """The source has no record of the package."""


class MetadataNetworkError(MetadataUnavailable):
    """The source could not be reached."""


class VersionUnparseable(PeerFixError):
    """A version string could not be coerced to a semantic version."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unparseable version: {value!r}")


class InstallFailure(PeerFixError):
    """An install batch failed twice (strict, then relaxed flags)."""

    def __init__(self, manager: str, specs: List[str]):
        self.manager = manager
        self.specs = list(specs)
        super().__init__(f"{manager} failed to install: {' '.join(self.specs)}")


class VerificationFailure(PeerFixError):
    """Installed versions could not be re-read after an install batch."""


class ConfigError(PeerFixError):
    """The configuration file is invalid."""
