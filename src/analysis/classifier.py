"""Deduplicate raw issues and partition them into report buckets."""

from __future__ import annotations

from typing import Iterable, List

from versioning.models import Classification, Issue, Severity


def dedupe(issues: Iterable[Issue]) -> List[Issue]:
    """Drop structurally repeated issues, keeping first occurrences in order."""
    seen = set()
    unique = []
    for issue in issues:
        if issue.key in seen:
            continue
        seen.add(issue.key)
        unique.append(issue)
    return unique


class IssueClassifier:
    """Partition issues into errors, warnings and optional.

    Optional-tagged issues always land in ``optional``; otherwise conflicts and
    missing peers are errors and overlapping-but-unsatisfied ranges are
    warnings. Input order is preserved within each bucket.
    """

    def classify(self, issues: Iterable[Issue]) -> Classification:
        errors: List[Issue] = []
        warnings: List[Issue] = []
        optional: List[Issue] = []

        for issue in dedupe(issues):
            if issue.is_optional:
                optional.append(issue)
            elif issue.severity in (Severity.CONFLICT, Severity.MISSING):
                errors.append(issue)
            elif issue.severity is Severity.WARNING:
                warnings.append(issue)
            else:
                raise ValueError(f"Unhandled severity: {issue.severity}")

        return Classification(errors=tuple(errors), warnings=tuple(warnings), optional=tuple(optional))


def classify(issues: Iterable[Issue]) -> Classification:
    """Module-level shortcut for ``IssueClassifier().classify``."""
    return IssueClassifier().classify(issues)
