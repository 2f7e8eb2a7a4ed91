"""NPM registry metadata source: resolves a declared spec against the packument."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import semantic_version

from constants import Constants
from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled
from errors import MetadataNetworkError, MetadataNotFound
from registry.base import MetadataSource, PeerMetadata, peer_metadata_from_manifest
from versioning.constraints import parse_range

logger = logging.getLogger(__name__)

_PACKUMENT_HEADERS = {
    "Accept": "application/json"
}


def pick_version(packument: Dict[str, Any], spec_str: str) -> Optional[str]:
    """Pick the version a declared spec resolves to.

    Exact versions and dist-tags are looked up directly; ranges pick the
    highest matching non-prerelease version.
    """
    versions = packument.get("versions") or {}
    dist_tags = packument.get("dist-tags") or {}
    spec = (spec_str or "").strip()

    if spec in versions:
        return spec
    if spec in dist_tags:
        return dist_tags[spec]
    if spec in ("", "*"):
        return dist_tags.get("latest")

    npm_spec = parse_range(spec)
    if npm_spec is None:
        return None

    matching: List[semantic_version.Version] = []
    for v in versions:
        try:
            ver = semantic_version.Version(v)
        except ValueError:
            continue  # Skip invalid versions
        if npm_spec.match(ver):
            matching.append(ver)
    if not matching:
        return None
    matching.sort(reverse=True)
    return str(matching[0])


class RegistrySource(MetadataSource):
    """Queries the npm registry for the version a declared spec resolves to."""

    name = "registry"

    def __init__(self, registry_url: str = Constants.REGISTRY_URL_NPM):
        self.registry_url = registry_url if registry_url.endswith("/") else registry_url + "/"

    def fetch_peer_requirements(self, name: str, version: str) -> PeerMetadata:
        url = self.registry_url + quote(name, safe="@")
        status_code, _, data = get_json(url, headers=_PACKUMENT_HEADERS)

        if status_code == 404:
            raise MetadataNotFound(name, "not found in registry")
        if status_code != 200 or not isinstance(data, dict):
            raise MetadataNetworkError(name, f"registry returned status {status_code}")

        resolved = pick_version(data, version)
        if resolved is None:
            raise MetadataNotFound(name, f"no published version matches {version!r}")

        if is_debug_enabled(logger):
            logger.debug(
                "Resolved declared spec",
                extra=extra_context(
                    event="decision",
                    component="registry",
                    action="pick_version",
                    target=name,
                    outcome=resolved,
                    package_manager="npm"
                )
            )
        versions = data.get("versions")
        manifest = versions.get(resolved) if isinstance(versions, dict) else None
        if not isinstance(manifest, dict):
            raise MetadataNotFound(name, f"malformed manifest for version {resolved}")
        return peer_metadata_from_manifest(manifest, version=resolved)
