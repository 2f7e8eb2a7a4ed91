"""Peer metadata sources.

- base.py: MetadataSource capability and PeerMetadata
- lockfile.py: package-lock.json / pnpm-lock.yaml / bun.lock
- installed.py: node_modules inspection
- npm.py: npm registry packuments
"""

from constants import Constants, MetadataSources

from .base import MetadataSource, PeerMetadata
from .installed import InstalledSource, read_installed_versions
from .lockfile import LockfileSource
from .npm import RegistrySource


def get_source(kind: str, project_dir: str, registry_url: str = Constants.REGISTRY_URL_NPM) -> MetadataSource:
    """Build the metadata source named by ``kind``."""
    if kind == MetadataSources.LOCKFILE.value:
        return LockfileSource(project_dir)
    if kind == MetadataSources.INSTALLED.value:
        return InstalledSource(project_dir)
    if kind == MetadataSources.REGISTRY.value:
        return RegistrySource(registry_url)
    raise ValueError(f"Unknown metadata source: {kind}")


__all__ = [
    "MetadataSource",
    "PeerMetadata",
    "InstalledSource",
    "LockfileSource",
    "RegistrySource",
    "get_source",
    "read_installed_versions",
]
