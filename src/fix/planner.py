"""Turn peer errors into batched install commands and run them.

Each error yields a ``name@range`` specifier; identical specifiers collapse to
the first. Specifiers are chunked into fixed-size batches to stay under
command-length limits. A failing batch is retried once with relaxed peer
flags; a second failure only affects that batch, and earlier batches are
never rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from constants import Constants
from errors import InstallFailure, VerificationFailure
from fix.installer import Installer, get_install_command
from versioning.constraints import evaluate
from versioning.models import Evaluation, InstallSpec, Issue

logger = logging.getLogger(__name__)


def chunk(items: Sequence, size: int) -> List[Tuple]:
    """Split ``items`` into consecutive tuples of at most ``size`` elements."""
    if size < 1:
        raise ValueError("batch size must be at least 1")
    return [tuple(items[i:i + size]) for i in range(0, len(items), size)]


def spec_for(issue: Issue) -> InstallSpec:
    return InstallSpec(name=issue.peer, range=issue.required)


@dataclass(frozen=True)
class FixPlan:
    """Ordered install specifiers, already split into batches."""
    manager: str
    batches: Tuple[Tuple[InstallSpec, ...], ...] = ()

    @property
    def specs(self) -> List[InstallSpec]:
        return [spec for batch in self.batches for spec in batch]

    def commands(self, relaxed: bool = False) -> List[List[str]]:
        """Command argv for every batch, in order."""
        command = get_install_command(self.manager)
        return [command.argv([str(s) for s in batch], relaxed=relaxed) for batch in self.batches]


@dataclass
class FixOutcome:
    """Result of executing a FixPlan."""
    installed: List[List[str]] = field(default_factory=list)
    failed: List[List[str]] = field(default_factory=list)
    needs_manual: List[str] = field(default_factory=list)
    verification_warnings: List[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        """True when every batch installed and verified."""
        return not self.failed and not self.needs_manual

    def to_dict(self) -> dict:
        return {
            "installed": self.installed,
            "failed": self.failed,
            "needs_manual": self.needs_manual,
            "verification_warnings": self.verification_warnings,
        }


def suggested_commands(errors: Iterable[Issue], manager: str) -> Dict[str, str]:
    """Install command text grouped by required range, in first-seen order."""
    grouped: Dict[str, List[str]] = {}
    for issue in errors:
        quoted = spec_for(issue).quoted()
        bucket = grouped.setdefault(issue.required, [])
        if quoted not in bucket:
            bucket.append(quoted)
    base = " ".join(get_install_command(manager).base)
    return {rng: f"{base} {' '.join(specs)}" for rng, specs in grouped.items()}


class FixPlanner:
    """Plans and executes installs for classified peer errors."""

    def __init__(self, batch_size: int = Constants.BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch size must be at least 1")
        self.batch_size = batch_size

    def plan(self, errors: Iterable[Issue], manager: str) -> FixPlan:
        """One specifier per distinct ``peer@range``, in first-seen order, chunked into batches."""
        specs: List[InstallSpec] = []
        for issue in errors:
            spec = spec_for(issue)
            if spec not in specs:
                specs.append(spec)
        return FixPlan(manager=manager, batches=tuple(chunk(specs, self.batch_size)))

    def execute(self, plan: FixPlan, installer: Installer) -> FixOutcome:
        """Install each batch, then verify it against re-read installed versions."""
        outcome = FixOutcome()
        for index, batch in enumerate(plan.batches, start=1):
            specs = [str(s) for s in batch]
            logger.info("Installing batch %d/%d (%d packages)", index, len(plan.batches), len(batch))
            try:
                self._install_batch(plan.manager, specs, installer)
            except InstallFailure as e:
                logger.error("%s", e)
                outcome.failed.append(specs)
                continue
            outcome.installed.append(specs)
            self._verify_batch(plan.manager, batch, installer, outcome)

        if outcome.needs_manual:
            logger.warning("The following dependencies may need manual installation: %s",
                           ", ".join(outcome.needs_manual))
        return outcome

    def _install_batch(self, manager: str, specs: List[str], installer: Installer) -> None:
        if installer.install(manager, specs, relaxed=False):
            return
        logger.warning("Install failed with strict peer flags, retrying with relaxed flags")
        if installer.install(manager, specs, relaxed=True):
            return
        raise InstallFailure(manager, specs)

    def _verify_batch(self, manager: str, batch: Sequence[InstallSpec], installer: Installer,
                      outcome: FixOutcome) -> None:
        try:
            installed = installer.list_installed(manager)
        except VerificationFailure as e:
            message = f"Unable to verify installation: {e}"
            logger.warning("%s", message)
            outcome.verification_warnings.append(message)
            outcome.needs_manual.extend(str(s) for s in batch)
            return

        for spec in batch:
            version = installed.get(spec.name)
            if version is None:
                outcome.needs_manual.append(str(spec))
            elif spec.range and evaluate(spec.range, version) is not Evaluation.SATISFIED:
                outcome.verification_warnings.append(
                    f"{spec.name} installed at {version}, which does not satisfy {spec.range}"
                )
                outcome.needs_manual.append(str(spec))
