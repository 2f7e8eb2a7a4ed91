"""Dependency catalog: declared dependencies augmented with peer metadata.

The catalog is built in two phases. The manifest is read and validated first
(any failure there is fatal), then peer metadata for every declared package
is fetched through a bounded worker pool. All fetches are merged before the
catalog is returned, so it is never mutated while being traversed.
"""

from __future__ import annotations

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from constants import Constants, DependencyKind
from common.logging_utils import extra_context, is_debug_enabled, Timer
from errors import ManifestUnreadable, MetadataUnavailable
from registry.base import MetadataSource, PeerMetadata
from versioning.models import PackageRecord

logger = logging.getLogger(__name__)

_KIND_ALIASES = {
    "runtime": DependencyKind.RUNTIME,
    "dev": DependencyKind.DEV,
    "peer": DependencyKind.PEER,
}


@dataclass
class Manifest:
    """Declared dependencies by kind, in lookup precedence order."""
    declared: Dict[DependencyKind, Dict[str, str]] = field(default_factory=dict)
    path: Optional[str] = None
    package_manager: Optional[str] = None

    def entries(self) -> List[Tuple[str, str, DependencyKind]]:
        """Flatten to unique (name, spec, kind); earlier kinds win on duplicates."""
        seen = set()
        out = []
        for kind in DependencyKind:
            for name, spec in self.declared.get(kind, {}).items():
                if name in seen:
                    logger.debug("%s declared under more than one kind; keeping first", name)
                    continue
                seen.add(name)
                out.append((name, spec, kind))
        return out


def _resolve_kind(key: Any) -> Optional[DependencyKind]:
    if isinstance(key, DependencyKind):
        return key
    if not isinstance(key, str):
        return None
    if key in _KIND_ALIASES:
        return _KIND_ALIASES[key]
    for kind in DependencyKind:
        if kind.value == key:
            return kind
    return None


def _package_manager_field(value: Any) -> Optional[str]:
    """``"yarn@4.5.3"`` -> ``"yarn"`` when it names a supported manager."""
    if not isinstance(value, str):
        return None
    manager = value.split("@", 1)[0].strip()
    return manager if manager in Constants.SUPPORTED_MANAGERS else None


def parse_manifest(data: Mapping[str, Any], path: Optional[str] = None) -> Manifest:
    """Validate a manifest mapping and extract its dependency sections.

    Raises:
        ManifestUnreadable: If a dependency section or spec has the wrong shape.
    """
    if not isinstance(data, Mapping):
        raise ManifestUnreadable(path, "top-level value is not an object")

    declared: Dict[DependencyKind, Dict[str, str]] = {}
    for key, section in data.items():
        kind = _resolve_kind(key)
        if kind is None or section is None:
            continue
        if not isinstance(section, Mapping):
            raise ManifestUnreadable(path, f"'{key}' is not an object")
        entries: Dict[str, str] = {}
        for name, spec in section.items():
            if not isinstance(name, str) or not isinstance(spec, str):
                raise ManifestUnreadable(path, f"invalid entry {name!r} in '{key}'")
            entries[name] = spec
        declared.setdefault(kind, {}).update(entries)

    return Manifest(
        declared={k: declared[k] for k in DependencyKind if k in declared},
        path=path,
        package_manager=_package_manager_field(data.get("packageManager")),
    )


def load_manifest(source: Union[str, Mapping[str, Any]]) -> Manifest:
    """Load a manifest from a mapping, a package.json path, or a project directory.

    Raises:
        ManifestUnreadable: If the file is missing or is not valid JSON.
    """
    if isinstance(source, Mapping):
        return parse_manifest(source)

    path = source
    if os.path.isdir(path):
        path = os.path.join(path, Constants.PACKAGE_JSON_FILE)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManifestUnreadable(path, "file not found") from e
    except (OSError, ValueError) as e:
        raise ManifestUnreadable(path, str(e)) from e
    return parse_manifest(data, path=path)


class DependencyCatalog:
    """Immutable, ordered set of PackageRecords keyed by package name.

    Lookups search every declared kind uniformly.
    """

    def __init__(self, records: Iterable[PackageRecord] = ()):
        self._records: Dict[str, PackageRecord] = {}
        for record in records:
            if record.name in self._records:
                raise ValueError(f"Duplicate package in catalog: {record.name}")
            self._records[record.name] = record

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[PackageRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def get(self, name: str) -> Optional[PackageRecord]:
        return self._records.get(name)

    def names(self) -> List[str]:
        return list(self._records)

    @classmethod
    def load(
        cls,
        manifest: Union[Manifest, str, Mapping[str, Any]],
        source: MetadataSource,
        max_workers: int = Constants.MAX_WORKERS,
    ) -> "DependencyCatalog":
        """Build a catalog, fetching peer metadata for every declared package.

        A failed fetch degrades that package to an empty peer set; only an
        unreadable manifest is fatal.
        """
        if not isinstance(manifest, Manifest):
            manifest = load_manifest(manifest)
        entries = manifest.entries()

        metadata: Dict[str, PeerMetadata] = {}
        with Timer() as t:
            if entries:
                workers = max(1, min(max_workers, len(entries)))
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    future_to_name = {
                        executor.submit(source.fetch_peer_requirements, name, spec): name
                        for name, spec, _ in entries
                    }
                    for future in as_completed(future_to_name):
                        name = future_to_name[future]
                        try:
                            metadata[name] = future.result()
                        except MetadataUnavailable as e:
                            logger.warning("%s; continuing without its peer requirements", e)
                        except Exception as e:  # pylint: disable=broad-exception-caught
                            logger.warning(
                                "Unexpected error fetching peer metadata for %s: %s; "
                                "continuing without its peer requirements",
                                name, e,
                            )

        if is_debug_enabled(logger):
            logger.debug(
                "Catalog loaded",
                extra=extra_context(
                    event="function_exit",
                    component="catalog",
                    action="load",
                    source=source.name,
                    count=len(entries),
                    degraded=len(entries) - len(metadata),
                    duration_ms=t.duration_ms()
                )
            )

        records = []
        for name, spec, kind in entries:
            meta = metadata.get(name, PeerMetadata())
            records.append(PackageRecord(
                name=name,
                declared=spec,
                kind=kind,
                installed=meta.version,
                peers=meta.peers,
                optional_peers=meta.optional_peers,
            ))
        return cls(records)


def default_manager(manifest: Manifest) -> str:
    """Manager named by the manifest's ``packageManager`` field, else npm."""
    return manifest.package_manager or Constants.DEFAULT_MANAGER
