"""Constants used in the project."""

import json
import logging
import os
from enum import Enum

import yaml

logger = logging.getLogger(__name__)

VERSION = "1.2.0"


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    PEER_ERRORS = 3
    INSTALL_ERROR = 4


class PackageManagers(Enum):
    """Package managers supported by the program.

    Args:
        Enum (string): Package managers supported by the program.
    """

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"


class DependencyKind(Enum):
    """Dependency sections of a manifest, in lookup precedence order."""

    RUNTIME = "dependencies"
    DEV = "devDependencies"
    PEER = "peerDependencies"


class MetadataSources(Enum):
    """Where peer-requirement metadata is read from."""

    LOCKFILE = "lockfile"
    INSTALLED = "installed"
    REGISTRY = "registry"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    SUPPORTED_MANAGERS = [m.value for m in PackageManagers]
    SUPPORTED_SOURCES = [s.value for s in MetadataSources]
    PACKAGE_JSON_FILE = "package.json"
    PACKAGE_LOCK_FILE = "package-lock.json"
    NODE_MODULES_DIR = "node_modules"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "PEERFIX_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_CACHE_TTL_SEC = 300
    INSTALL_TIMEOUT = 600

    # Ecosystem-internal namespaces never treated as peer requirements
    IGNORE_PATTERNS = [
        r"^@types/",
        r"^@babel/",
        r"^@eslint/",
    ]
    # Unsatisfied peers reported as optional rather than as errors
    OPTIONAL_PEERS = [
        "supports-color",
        "encoding",
        "ts-node",
    ]
    BATCH_SIZE = 10
    MAX_WORKERS = 8
    DEFAULT_SOURCE = MetadataSources.INSTALLED.value
    DEFAULT_MANAGER = PackageManagers.NPM.value


def _load_yaml_config(path=None):
    """Load a YAML (or JSON) config file into a dict.

    Without an explicit path, ``PEERFIX_CONFIG`` and then ``.peerfix.yml`` in
    the working directory are tried. Returns an empty dict when nothing is
    found.

    Raises:
        OSError: If an explicitly named file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
    """
    candidates = [path] if path else [os.environ.get("PEERFIX_CONFIG"), ".peerfix.yml", ".peerfix.yaml"]
    for candidate in candidates:
        if not candidate:
            continue
        if not path and not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as f:
            if candidate.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        logger.debug("Loaded config from %s", candidate)
        return data if isinstance(data, dict) else {}
    return {}
