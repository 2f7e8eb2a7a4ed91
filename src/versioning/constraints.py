"""npm-style version constraint evaluation using semantic versioning."""

import logging
import re
from typing import List, Optional

import semantic_version

from errors import VersionUnparseable

from .models import Evaluation
from .parser import coerce_version, parse_version

logger = logging.getLogger(__name__)

_BOUNDARY = re.compile(r"\d+(?:\.\d+){0,2}(?:-[0-9A-Za-z.\-]+)?")
_MATCH_ALL = {"", "*", "x", "X", "latest"}


def _is_exact(value: str) -> bool:
    """True when ``value`` is a single version rather than a range."""
    try:
        semantic_version.Version(value.strip().lstrip("=v").strip())
    except ValueError:
        return False
    return True


def parse_range(spec_str: str) -> Optional[semantic_version.NpmSpec]:
    """Parse an npm range, returning None when it is not valid npm syntax."""
    s = spec_str.strip()
    if s in _MATCH_ALL:
        s = "*"
    try:
        return semantic_version.NpmSpec(s)
    except ValueError:
        return None


def _witnesses(*spec_strs: str) -> List[semantic_version.Version]:
    """Candidate versions that decide whether npm ranges overlap.

    Any non-empty intersection of comparator ranges over release versions
    starts at 0.0.0, at a boundary version, or at the immediate successor of an
    exclusive boundary, so probing these points is sufficient.
    """
    seen = {semantic_version.Version("0.0.0")}
    for spec_str in spec_strs:
        for token in _BOUNDARY.findall(spec_str):
            try:
                exact = semantic_version.Version(token)
                seen.add(exact)
            except ValueError:
                pass
            base = coerce_version(token)
            if base is None:
                continue
            seen.update((base, base.next_patch(), base.next_minor(), base.next_major()))
    return sorted(seen)


def intersects(left: semantic_version.NpmSpec, right: semantic_version.NpmSpec,
               left_str: str, right_str: str) -> bool:
    """Return True when at least one version satisfies both ranges."""
    for candidate in _witnesses(left_str, right_str):
        if left.match(candidate) and right.match(candidate):
            return True
    return False


class ConstraintEvaluator:
    """Decide whether a current version meets a required peer range.

    ``Missing`` when there is no current version, ``Satisfied`` when the
    (coerced) current version matches the range, ``Warning`` when the range
    derived from the current spec overlaps the requirement without the version
    itself matching, and ``Conflict`` otherwise. Anything that cannot be parsed
    or coerced is a ``Conflict``.
    """

    def evaluate(self, required: str, current: Optional[str]) -> Evaluation:
        if current is None or not str(current).strip():
            return Evaluation.MISSING

        required_spec = parse_range(required)
        if required_spec is None:
            logger.debug("Unparseable required range %r; treating as conflict", required)
            return Evaluation.CONFLICT

        try:
            version = parse_version(current)
        except VersionUnparseable as e:
            logger.debug("%s; treating as conflict", e)
            return Evaluation.CONFLICT

        if required_spec.match(version):
            return Evaluation.SATISFIED

        current_spec = None if _is_exact(current) else parse_range(current)
        if current_spec is None:
            # Exact versions pin to themselves, prerelease included
            pinned = str(version.truncate("prerelease"))
            current_spec = semantic_version.NpmSpec("=" + pinned)
            current_str = pinned
        else:
            current_str = current

        if intersects(required_spec, current_spec, required, current_str):
            return Evaluation.WARNING
        return Evaluation.CONFLICT


_default_evaluator = ConstraintEvaluator()


def evaluate(required: str, current: Optional[str]) -> Evaluation:
    """Module-level shortcut for ``ConstraintEvaluator().evaluate``."""
    return _default_evaluator.evaluate(required, current)
