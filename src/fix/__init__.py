"""Fix planning and package installation.

- planner.py: batching, retry and verification of install commands
- installer.py: Installer capability and per-manager command configurations
"""

from .installer import INSTALL_COMMANDS, Installer, InstallCommand, SubprocessInstaller
from .planner import FixOutcome, FixPlan, FixPlanner, suggested_commands

__all__ = [
    "INSTALL_COMMANDS",
    "Installer",
    "InstallCommand",
    "SubprocessInstaller",
    "FixOutcome",
    "FixPlan",
    "FixPlanner",
    "suggested_commands",
]
