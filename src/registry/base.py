"""Base class and shared helpers for peer metadata sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional


@dataclass(frozen=True)
class PeerMetadata:
    """What a source knows about one package's peer requirements."""

    peers: Mapping[str, str] = field(default_factory=dict)
    optional_peers: FrozenSet[str] = frozenset()
    version: Optional[str] = None  # installed or resolved version, if known


class MetadataSource(ABC):
    """Capability interface for fetching a package's peer requirements.

    Implementations raise ``MetadataNotFound`` or ``MetadataNetworkError``
    (both ``MetadataUnavailable``) on failure; callers treat these as
    non-fatal.
    """

    name = "abstract"

    @abstractmethod
    def fetch_peer_requirements(self, name: str, version: str) -> PeerMetadata:
        """Return peer metadata for ``name`` at the declared ``version`` spec."""


def peer_metadata_from_manifest(data: Mapping[str, Any], version: Optional[str] = None) -> PeerMetadata:
    """Extract peer metadata from a package.json-shaped mapping.

    ``peerDependenciesMeta`` entries flagged ``optional: true`` populate
    ``optional_peers``. Non-string ranges are skipped.
    """
    raw_peers = data.get("peerDependencies") or {}
    peers: Dict[str, str] = {}
    if isinstance(raw_peers, dict):
        for peer, rng in raw_peers.items():
            if isinstance(peer, str) and isinstance(rng, str):
                peers[peer] = rng

    optional = set()
    meta = data.get("peerDependenciesMeta") or {}
    if isinstance(meta, dict):
        for peer, flags in meta.items():
            if isinstance(flags, dict) and flags.get("optional") is True:
                optional.add(peer)

    found_version = version if version is not None else data.get("version")
    if not isinstance(found_version, str):
        found_version = None
    return PeerMetadata(peers=peers, optional_peers=frozenset(optional), version=found_version)
