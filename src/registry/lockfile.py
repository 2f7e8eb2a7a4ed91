"""Lockfile-backed peer metadata (package-lock.json, pnpm-lock.yaml, bun.lock).

Lockfiles record both the resolved version and, for modern formats, each
package's declared peer requirements, so no network access is needed.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Optional, Tuple

import yaml

from constants import Constants
from errors import MetadataNotFound
from registry.base import MetadataSource, PeerMetadata, peer_metadata_from_manifest
from versioning.parser import parse_install_spec

logger = logging.getLogger(__name__)

PNPM_LOCK_FILE = "pnpm-lock.yaml"
BUN_LOCK_FILE = "bun.lock"


def _strip_jsonc_comments(content: str) -> str:
    """Strip comments and trailing commas from JSONC content."""
    content = re.sub(r'^\s*//.*?$', '', content, flags=re.MULTILINE)
    content = re.sub(r'/\*.*?\*/', '', content, flags=re.DOTALL)
    content = re.sub(r',(\s*[}\]])', r'\1', content)
    return content


def discover_lockfile(dir_path: str) -> Tuple[Optional[str], str]:
    """Select a lockfile by precedence: package-lock.json > pnpm-lock.yaml > bun.lock.

    Returns:
        Tuple of (selected_lockfile_path or None, format name)
    """
    found = []
    for filename, fmt in (
        (Constants.PACKAGE_LOCK_FILE, "npm"),
        (PNPM_LOCK_FILE, "pnpm"),
        (BUN_LOCK_FILE, "bun"),
    ):
        path = os.path.join(dir_path, filename)
        if os.path.isfile(path):
            found.append((path, fmt))
    if not found:
        return None, ""
    if len(found) > 1:
        logger.warning(
            "Multiple lockfiles found; using %s and ignoring %s",
            found[0][0],
            ", ".join(p for p, _ in found[1:]),
        )
    return found[0]


def _index_package_lock(data: Dict[str, Any]) -> Dict[str, PeerMetadata]:
    index: Dict[str, PeerMetadata] = {}
    lockfile_version = data.get("lockfileVersion", 1)
    if lockfile_version == 1:
        logger.warning("package-lock.json v1 does not record peer dependencies; only versions are available")
        for pkg_name, pkg_info in (data.get("dependencies") or {}).items():
            if isinstance(pkg_info, dict) and isinstance(pkg_info.get("version"), str):
                index[pkg_name] = PeerMetadata(version=pkg_info["version"])
        return index

    for pkg_path, pkg_info in (data.get("packages") or {}).items():
        # Only hoisted top-level installs; nested copies are private to their parent
        if not pkg_path.startswith("node_modules/") or not isinstance(pkg_info, dict):
            continue
        name = pkg_path[len("node_modules/"):]
        if "/node_modules/" in name:
            continue
        index[name] = peer_metadata_from_manifest(pkg_info)
    return index


def _strip_pnpm_peer_suffix(version: str) -> str:
    """``18.2.0(react@18.2.0)`` -> ``18.2.0``."""
    return version.split("(", 1)[0].strip()


def _index_pnpm_lock(data: Dict[str, Any]) -> Dict[str, PeerMetadata]:
    importers = data.get("importers") or {}
    root = importers.get(".") or {}
    packages = data.get("packages") or {}

    index: Dict[str, PeerMetadata] = {}
    for section in ("dependencies", "devDependencies", "optionalDependencies"):
        for name, entry in (root.get(section) or {}).items():
            version = entry.get("version") if isinstance(entry, dict) else entry
            if not isinstance(version, str):
                continue
            version = _strip_pnpm_peer_suffix(version)
            info = packages.get(f"{name}@{version}") or packages.get(f"/{name}@{version}") or {}
            index[name] = peer_metadata_from_manifest(info if isinstance(info, dict) else {}, version=version)
    return index


def _index_bun_lock(data: Dict[str, Any]) -> Dict[str, PeerMetadata]:
    index: Dict[str, PeerMetadata] = {}
    for name, entry in (data.get("packages") or {}).items():
        # Entries look like ["name@1.2.3", "", {metadata}, "sha512-..."]
        if not isinstance(entry, list) or not entry or not isinstance(entry[0], str):
            continue
        if not entry[0].strip():
            continue
        version = parse_install_spec(entry[0]).range
        meta = entry[2] if len(entry) > 2 and isinstance(entry[2], dict) else {}
        pm = peer_metadata_from_manifest(meta, version=version or None)
        optional = set(pm.optional_peers) | set(meta.get("optionalPeers") or [])
        index[name] = PeerMetadata(peers=pm.peers, optional_peers=frozenset(optional), version=pm.version)
    return index


class LockfileSource(MetadataSource):
    """Reads peer metadata from the project's lockfile.

    The lockfile is parsed once on construction; a missing or unreadable
    lockfile leaves the index empty so every lookup reports ``MetadataNotFound``.
    """

    name = "lockfile"

    def __init__(self, project_dir: str, lockfile_path: Optional[str] = None):
        self.project_dir = project_dir
        fmt = ""
        if lockfile_path is None:
            lockfile_path, fmt = discover_lockfile(project_dir)
        self.lockfile_path = lockfile_path
        self._index: Dict[str, PeerMetadata] = {}
        if lockfile_path is None:
            logger.warning("No lockfile found in %s; peer metadata will be empty", project_dir)
            return
        self._index = self._load(lockfile_path, fmt or self._format_of(lockfile_path))

    @staticmethod
    def _format_of(path: str) -> str:
        base = os.path.basename(path)
        if base == PNPM_LOCK_FILE:
            return "pnpm"
        if base == BUN_LOCK_FILE:
            return "bun"
        return "npm"

    def _load(self, path: str, fmt: str) -> Dict[str, PeerMetadata]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
            if fmt == "pnpm":
                return _index_pnpm_lock(yaml.safe_load(content) or {})
            if fmt == "bun":
                return _index_bun_lock(json.loads(_strip_jsonc_comments(content)))
            return _index_package_lock(json.loads(content))
        except (OSError, json.JSONDecodeError, yaml.YAMLError, AttributeError, TypeError) as e:
            logger.warning("Failed to parse %s: %s", path, e)
            return {}

    def fetch_peer_requirements(self, name: str, version: str) -> PeerMetadata:
        try:
            return self._index[name]
        except KeyError:
            raise MetadataNotFound(name, f"not present in {self.lockfile_path or 'lockfile'}") from None
