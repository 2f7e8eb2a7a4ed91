"""Recursive peer-requirement traversal over a dependency catalog."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Set

from catalog import DependencyCatalog
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from versioning.constraints import ConstraintEvaluator
from versioning.models import Evaluation, Issue, PeerRequirement, Severity

logger = logging.getLogger(__name__)


def describe(req: PeerRequirement, current: Optional[str], severity: Severity) -> str:
    """Human-readable detail line for an issue."""
    if severity is Severity.MISSING:
        return f"{req.consumer} requires {req.peer}@{req.required}, but it is not installed"
    if severity is Severity.CONFLICT:
        return f"{req.consumer} requires {req.peer}@{req.required}, but {current} is installed"
    if severity is Severity.WARNING:
        return (f"{req.consumer} requires {req.peer}@{req.required}; "
                f"{current} overlaps that range but does not satisfy it")
    raise ValueError(f"Unhandled severity: {severity}")


class GraphWalker:
    """Depth-first walk of peer edges, emitting an Issue per unmet requirement.

    Peers matching an ignore pattern are skipped entirely. Peers on the
    optional list, or flagged optional by their consumer, are tagged
    ``is_optional``. Each package is entered at most once per root traversal.
    """

    def __init__(
        self,
        ignore_patterns: Optional[Iterable[str]] = None,
        optional_peers: Optional[Iterable[str]] = None,
        evaluator: Optional[ConstraintEvaluator] = None,
    ):
        patterns = Constants.IGNORE_PATTERNS if ignore_patterns is None else ignore_patterns
        self.ignore_patterns = [re.compile(p) for p in patterns]
        self.optional_peers = frozenset(Constants.OPTIONAL_PEERS if optional_peers is None else optional_peers)
        self.evaluator = evaluator or ConstraintEvaluator()

    def is_ignored(self, peer: str) -> bool:
        return any(p.search(peer) for p in self.ignore_patterns)

    def walk(self, root: str, catalog: DependencyCatalog, visited: Optional[Set[str]] = None) -> List[Issue]:
        """Collect issues reachable from ``root``.

        ``visited`` is owned by the caller's traversal; pass a fresh set (or
        None) per root.
        """
        if visited is None:
            visited = set()
        if root in visited:
            return []
        visited.add(root)

        record = catalog.get(root)
        if record is None:
            return []

        issues: List[Issue] = []
        for req in record.requirements():
            if self.is_ignored(req.peer):
                continue

            peer_record = catalog.get(req.peer)
            current = peer_record.current if peer_record is not None else None
            evaluation = self.evaluator.evaluate(req.required, current)

            if evaluation is not Evaluation.SATISFIED:
                severity = Severity.from_evaluation(evaluation)
                issues.append(Issue(
                    consumer=req.consumer,
                    peer=req.peer,
                    required=req.required,
                    current=current,
                    severity=severity,
                    is_optional=req.peer in self.optional_peers or req.peer in record.optional_peers,
                    detail=describe(req, current, severity),
                ))

            if peer_record is not None:
                issues.extend(self.walk(req.peer, catalog, visited))

        return issues

    def walk_all(self, catalog: DependencyCatalog) -> List[Issue]:
        """Walk every catalog package as a root, each with its own visited set."""
        issues: List[Issue] = []
        for record in catalog:
            issues.extend(self.walk(record.name, catalog, set()))
        if is_debug_enabled(logger):
            logger.debug(
                "Walk complete",
                extra=extra_context(
                    event="function_exit",
                    component="walker",
                    action="walk_all",
                    roots=len(catalog),
                    count=len(issues)
                )
            )
        return issues
