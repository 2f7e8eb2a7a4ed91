"""Installer capability and per-manager install command configurations."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence

from constants import Constants, PackageManagers
from errors import VerificationFailure
from registry.installed import read_installed_versions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCommand:
    """How a package manager adds packages."""

    base: List[str]
    strict_flags: List[str] = field(default_factory=list)
    relaxed_flags: List[str] = field(default_factory=list)

    def argv(self, specs: Sequence[str], relaxed: bool = False) -> List[str]:
        flags = self.relaxed_flags if relaxed else self.strict_flags
        return [*self.base, *flags, *specs]


INSTALL_COMMANDS: Dict[str, InstallCommand] = {
    PackageManagers.NPM.value: InstallCommand(
        base=["npm", "install"],
        strict_flags=["--strict-peer-deps"],
        relaxed_flags=["--legacy-peer-deps"],
    ),
    PackageManagers.YARN.value: InstallCommand(base=["yarn", "add"]),
    PackageManagers.PNPM.value: InstallCommand(
        base=["pnpm", "add"],
        strict_flags=["--strict-peer-dependencies"],
    ),
    PackageManagers.BUN.value: InstallCommand(base=["bun", "add"]),
}


def get_install_command(manager: str) -> InstallCommand:
    """Return the install command for ``manager``, falling back to npm."""
    command = INSTALL_COMMANDS.get(manager)
    if command is None:
        logger.warning("Unknown package manager %r; using npm", manager)
        command = INSTALL_COMMANDS[PackageManagers.NPM.value]
    return command


class Installer(ABC):
    """Capability interface for installing packages and reading them back."""

    @abstractmethod
    def install(self, manager: str, specs: Sequence[str], relaxed: bool = False) -> bool:
        """Install ``specs``; return True on success."""

    @abstractmethod
    def list_installed(self, manager: str) -> Dict[str, str]:
        """Return installed package versions by name.

        Raises:
            VerificationFailure: If installed versions cannot be read.
        """


class SubprocessInstaller(Installer):
    """Runs the package manager in the project directory."""

    def __init__(self, project_dir: str, runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.project_dir = project_dir
        self._run = runner

    def install(self, manager: str, specs: Sequence[str], relaxed: bool = False) -> bool:
        cmd = get_install_command(manager).argv(specs, relaxed=relaxed)
        logger.info("Running: %s", " ".join(cmd))
        try:
            result = self._run(
                cmd,
                cwd=self.project_dir,
                capture_output=True,
                text=True,
                timeout=Constants.INSTALL_TIMEOUT,
                check=False,
            )
        except FileNotFoundError:
            logger.error("%s is not installed or not on PATH", cmd[0])
            return False
        except subprocess.TimeoutExpired:
            logger.error("%s timed out after %s seconds", cmd[0], Constants.INSTALL_TIMEOUT)
            return False

        if result.returncode != 0:
            logger.warning("%s exited with status %s", cmd[0], result.returncode)
            if result.stderr:
                logger.debug("%s stderr: %s", cmd[0], result.stderr.strip())
            return False
        return True

    def list_installed(self, manager: str) -> Dict[str, str]:
        installed = read_installed_versions(self.project_dir)
        if not installed:
            raise VerificationFailure(f"no packages found under {Constants.NODE_MODULES_DIR} in {self.project_dir}")
        return installed
