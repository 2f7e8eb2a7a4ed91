"""Peer metadata from packages already installed under node_modules."""

from __future__ import annotations

import json
import logging
import os
from typing import Dict

from constants import Constants
from errors import MetadataNotFound, MetadataUnavailable
from registry.base import MetadataSource, PeerMetadata, peer_metadata_from_manifest

logger = logging.getLogger(__name__)


def _read_package_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("package.json is not an object")
    return data


def read_installed_versions(project_dir: str) -> Dict[str, str]:
    """Map every top-level package in ``node_modules`` to its installed version.

    Scoped packages (``@scope/name``) are included. Unreadable entries are
    skipped.
    """
    root = os.path.join(project_dir, Constants.NODE_MODULES_DIR)
    installed: Dict[str, str] = {}
    if not os.path.isdir(root):
        return installed

    def _record(name: str, pkg_dir: str) -> None:
        manifest = os.path.join(pkg_dir, Constants.PACKAGE_JSON_FILE)
        if not os.path.isfile(manifest):
            return
        try:
            version = _read_package_json(manifest).get("version")
        except (OSError, ValueError) as e:
            logger.debug("Skipping unreadable %s: %s", manifest, e)
            return
        if isinstance(version, str):
            installed[name] = version

    for entry in sorted(os.listdir(root)):
        if entry.startswith("."):
            continue
        path = os.path.join(root, entry)
        if entry.startswith("@") and os.path.isdir(path):
            for sub in sorted(os.listdir(path)):
                _record(f"{entry}/{sub}", os.path.join(path, sub))
        else:
            _record(entry, path)
    return installed


class InstalledSource(MetadataSource):
    """Reads ``node_modules/<name>/package.json`` for each package."""

    name = "installed"

    def __init__(self, project_dir: str):
        self.project_dir = project_dir

    def fetch_peer_requirements(self, name: str, version: str) -> PeerMetadata:
        path = os.path.join(self.project_dir, Constants.NODE_MODULES_DIR, *name.split("/"),
                            Constants.PACKAGE_JSON_FILE)
        if not os.path.isfile(path):
            raise MetadataNotFound(name, "not installed in node_modules")
        try:
            data = _read_package_json(path)
        except (OSError, ValueError) as e:
            raise MetadataUnavailable(name, f"unreadable {path}: {e}") from e
        return peer_metadata_from_manifest(data)
