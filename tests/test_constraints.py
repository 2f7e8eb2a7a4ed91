"""Tests for npm range evaluation (Satisfied / Missing / Conflict / Warning)."""

import pytest

from versioning.constraints import ConstraintEvaluator, evaluate, intersects, parse_range
from versioning.models import Evaluation


class TestSatisfied:
    """Versions inside the required range are always satisfied."""

    @pytest.mark.parametrize("required,current", [
        ("^2.0.0", "2.1.0"),
        ("^2.0.0", "2.0.0"),
        ("^17.0.0 || ^18.0.0", "18.2.0"),
        ("^17.0.0 || ^18.0.0", "17.0.2"),
        (">=1.2.3 <2.0.0", "1.9.9"),
        ("~1.2.0", "1.2.9"),
        ("1.x", "1.4.0"),
        ("*", "0.1.0"),
        ("", "3.0.0"),
        ("1.2.3 - 1.4.5", "1.3.0"),
        ("=4.17.21", "4.17.21"),
    ])
    def test_matching_versions(self, required, current):
        """Versions inside the range are satisfied."""
        assert evaluate(required, current) is Evaluation.SATISFIED

    def test_v_prefix_is_coerced(self):
        """A v-prefixed version is coerced."""
        assert evaluate("^1.2.0", "v1.2.5") is Evaluation.SATISFIED

    def test_partial_version_is_coerced(self):
        """A partial version is zero-filled."""
        assert evaluate("^1.2.0", "1.2") is Evaluation.SATISFIED

    def test_declared_caret_spec_uses_its_base_version(self):
        """A declared range is checked by its base version."""
        assert evaluate("^1.0.0", "^1.5.0") is Evaluation.SATISFIED


class TestMissing:
    """Test missing current versions."""

    @pytest.mark.parametrize("current", [None, "", "   "])
    def test_no_current_version(self, current):
        """No current version is Missing."""
        assert evaluate("^2.0.0", current) is Evaluation.MISSING


class TestConflict:
    """Test versions that cannot satisfy the range."""

    def test_disjoint_exact_version(self):
        """An exact version outside the range conflicts."""
        assert evaluate("^2.0.0", "1.5.0") is Evaluation.CONFLICT

    def test_disjoint_declared_range(self):
        """A non-overlapping declared range conflicts."""
        assert evaluate("^2.0.0", "^1.5.0") is Evaluation.CONFLICT

    def test_prerelease_outside_range_is_conflict(self):
        """A prerelease is pinned exactly, not to its release."""
        assert evaluate(">=1.0.0", "2.0.0-beta.1") is Evaluation.CONFLICT

    def test_prerelease_inside_prerelease_range_is_satisfied(self):
        """A prerelease range admits a later prerelease of the same tuple."""
        assert evaluate("^2.0.0-beta.0", "2.0.0-beta.1") is Evaluation.SATISFIED

    def test_tilde_below_lower_bound(self):
        """A tilde range below the lower bound conflicts."""
        assert evaluate(">=1.0.0", "~0.9.0") is Evaluation.CONFLICT

    def test_uncoercible_current_is_conflict(self):
        """A dist-tag current version conflicts."""
        assert evaluate("^2.0.0", "latest") is Evaluation.CONFLICT

    def test_workspace_protocol_is_conflict(self):
        """A workspace protocol version conflicts."""
        assert evaluate("^2.0.0", "workspace:*") is Evaluation.CONFLICT

    def test_unparseable_required_is_conflict(self):
        """An unparseable required range conflicts."""
        assert evaluate("not-a-range", "1.0.0") is Evaluation.CONFLICT


class TestWarning:
    """Test overlapping but unsatisfied ranges."""

    def test_overlapping_ranges_unsatisfied_version(self):
        """Overlapping caret ranges give a warning."""
        # ^1.5.0 overlaps ^1.6.0, but its base 1.5.0 does not satisfy it
        assert evaluate("^1.6.0", "^1.5.0") is Evaluation.WARNING

    def test_overlapping_x_range(self):
        """An overlapping x-range gives a warning."""
        assert evaluate(">=1.2.5", "1.2.x") is Evaluation.WARNING


class TestIntersects:
    """Test range intersection."""

    def _check(self, left, right):
        return intersects(parse_range(left), parse_range(right), left, right)

    def test_exclusive_lower_bound_successor(self):
        """Exclusive bounds meet at the next patch."""
        assert self._check(">1.2.3", "<1.2.5") is True

    def test_adjacent_exclusive_ranges(self):
        """Adjacent half-open ranges do not meet."""
        assert self._check(">=1.2.4", "<1.2.4") is False

    def test_union_ranges(self):
        """One branch of a union is enough."""
        assert self._check("^16.0.0 || ^18.0.0", ">=17.0.0") is True

    def test_disjoint_carets(self):
        """Different-major carets do not meet."""
        assert self._check("^1.0.0", "^2.0.0") is False


class TestEvaluatorInstance:
    """Test the evaluator class against the module shortcut."""

    def test_instance_and_shortcut_agree(self):
        """The instance and the shortcut agree."""
        evaluator = ConstraintEvaluator()
        for required, current in [("^2.0.0", "1.5.0"), ("^2.0.0", "2.1.0"), ("^2.0.0", None)]:
            assert evaluator.evaluate(required, current) is evaluate(required, current)
