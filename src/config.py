"""Runtime settings: defaults, config file, then CLI overrides.

Precedence is Constants < config file (YAML or JSON) < command-line flags.
The config file is validated against a Draft-07 JSON Schema before use.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft7Validator

from constants import Constants, _load_yaml_config
from errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "ignore_patterns": {"type": "array", "items": {"type": "string"}},
        "optional_peers": {"type": "array", "items": {"type": "string"}},
        "batch_size": {"type": "integer", "minimum": 1},
        "max_workers": {"type": "integer", "minimum": 1},
        "source": {"type": "string", "enum": Constants.SUPPORTED_SOURCES},
        "manager": {"type": "string", "enum": Constants.SUPPORTED_MANAGERS},
        "registry_url": {"type": "string", "minLength": 1},
    },
}


@dataclass
class Settings:
    """Effective settings for one run."""
    ignore_patterns: List[str] = field(default_factory=lambda: list(Constants.IGNORE_PATTERNS))
    optional_peers: List[str] = field(default_factory=lambda: list(Constants.OPTIONAL_PEERS))
    batch_size: int = Constants.BATCH_SIZE
    max_workers: int = Constants.MAX_WORKERS
    source: str = Constants.DEFAULT_SOURCE
    manager: Optional[str] = None
    registry_url: str = Constants.REGISTRY_URL_NPM


def validate_config(data: Dict[str, Any]) -> None:
    """Validate a config mapping; raise ConfigError on the first problem."""
    validator = Draft7Validator(CONFIG_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ConfigError(f"Invalid config at '{path}': {first.message}")
    for pattern in data.get("ignore_patterns", []):
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid ignore pattern {pattern!r}: {e}") from e


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Read and validate a config file.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    try:
        data = _load_yaml_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load config {path}: {e}") from e
    validate_config(data)
    return data


def build_settings(args: Any = None, config: Optional[Dict[str, Any]] = None) -> Settings:
    """Merge defaults, config file values and CLI arguments.

    ``--ignore`` and ``--optional`` extend the configured lists rather than
    replacing them.
    """
    settings = Settings()
    for key, value in (config or {}).items():
        setattr(settings, key, list(value) if isinstance(value, list) else value)

    if args is None:
        return settings

    extra_ignore = getattr(args, "IGNORE", None) or []
    for pattern in extra_ignore:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid ignore pattern {pattern!r}: {e}") from e
    settings.ignore_patterns.extend(extra_ignore)
    settings.optional_peers.extend(getattr(args, "OPTIONAL", None) or [])

    if getattr(args, "BATCH_SIZE", None) is not None:
        settings.batch_size = int(args.BATCH_SIZE)
    if getattr(args, "WORKERS", None) is not None:
        settings.max_workers = int(args.WORKERS)
    if getattr(args, "SOURCE", None):
        settings.source = args.SOURCE
    if getattr(args, "MANAGER", None):
        settings.manager = args.MANAGER
    if getattr(args, "REGISTRY_URL", None):
        settings.registry_url = args.REGISTRY_URL

    if settings.batch_size < 1 or settings.max_workers < 1:
        raise ConfigError("batch size and worker count must be at least 1")
    logger.debug("Effective settings: %s", settings)
    return settings
