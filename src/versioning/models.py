"""Data models for peer dependency analysis."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Iterator, Mapping, Optional, Tuple

from constants import DependencyKind


class Evaluation(Enum):
    """Outcome of checking one (required range, current version) pair."""
    SATISFIED = "satisfied"
    MISSING = "missing"
    CONFLICT = "conflict"
    WARNING = "warning"


class Severity(Enum):
    """Severity of a reported issue."""
    MISSING = "missing"
    CONFLICT = "conflict"
    WARNING = "warning"

    @classmethod
    def from_evaluation(cls, evaluation: Evaluation) -> "Severity":
        """Map a non-satisfied evaluation to its severity."""
        if evaluation is Evaluation.MISSING:
            return cls.MISSING
        if evaluation is Evaluation.CONFLICT:
            return cls.CONFLICT
        if evaluation is Evaluation.WARNING:
            return cls.WARNING
        raise ValueError(f"No severity for {evaluation}")


@dataclass(frozen=True)
class PeerRequirement:
    """A consumer's requirement on one peer."""
    consumer: str
    peer: str
    required: str


@dataclass(frozen=True)
class PackageRecord:
    """One declared dependency with its own peer requirements.

    Immutable once the catalog is built; ``peers`` is a read-only mapping.
    """
    name: str
    declared: str
    kind: DependencyKind
    installed: Optional[str] = None
    peers: Mapping[str, str] = field(default_factory=dict)
    optional_peers: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "peers", MappingProxyType(dict(self.peers)))
        object.__setattr__(self, "optional_peers", frozenset(self.optional_peers))

    @property
    def current(self) -> str:
        """Installed version when known, otherwise the declared spec."""
        return self.installed or self.declared

    def requirements(self) -> Iterator[PeerRequirement]:
        """Yield this package's peer requirements in declaration order."""
        for peer, required in self.peers.items():
            yield PeerRequirement(consumer=self.name, peer=peer, required=required)


@dataclass(frozen=True)
class Issue:
    """A single unmet or questionable peer requirement."""
    consumer: str
    peer: str
    required: str
    current: Optional[str]  # None when the peer is missing
    severity: Severity
    is_optional: bool = False
    detail: str = ""

    @property
    def key(self) -> Tuple[str, str, str, Optional[str]]:
        """Structural identity used for deduplication."""
        return (self.consumer, self.peer, self.required, self.current)

    def to_dict(self) -> dict:
        return {
            "consumer": self.consumer,
            "peer": self.peer,
            "required": self.required,
            "current": self.current,
            "severity": self.severity.value,
            "optional": self.is_optional,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class Classification:
    """Issues partitioned into report buckets."""
    errors: Tuple[Issue, ...] = ()
    warnings: Tuple[Issue, ...] = ()
    optional: Tuple[Issue, ...] = ()

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass(frozen=True)
class InstallSpec:
    """A structured ``name@range`` install specifier."""
    name: str
    range: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}@{self.range}" if self.range else self.name

    def quoted(self) -> str:
        """Shell-friendly form used in suggested commands."""
        return f'{self.name}@"{self.range}"' if self.range else self.name
