"""Tests for specifier tokenization and version coercion."""

import pytest
import semantic_version

from errors import VersionUnparseable
from versioning.models import InstallSpec
from versioning.parser import coerce_version, parse_install_spec, parse_version, tokenize_rightmost_at


class TestTokenizeRightmostAt:
    """Test rightmost-@ tokenizing."""

    def test_plain_name_with_range(self):
        """A plain name splits at its @."""
        assert tokenize_rightmost_at("react@^18.0.0") == ("react", "^18.0.0")

    def test_scoped_name_with_range(self):
        """A scoped name keeps its leading @."""
        assert tokenize_rightmost_at("@mui/material@^5.0.0") == ("@mui/material", "^5.0.0")

    def test_scoped_name_without_range(self):
        """A bare scoped name has no range."""
        assert tokenize_rightmost_at("@emotion/react") == ("@emotion/react", None)

    def test_bare_name(self):
        """A bare name has no range."""
        assert tokenize_rightmost_at("lodash") == ("lodash", None)

    def test_trailing_at_has_no_range(self):
        """A trailing @ has no range."""
        assert tokenize_rightmost_at("lodash@") == ("lodash", None)


class TestParseInstallSpec:
    """Test install specifier parsing."""

    def test_structured_pair(self):
        """A scoped specifier parses into name and range."""
        spec = parse_install_spec("@emotion/styled@^11.3.0")
        assert spec == InstallSpec(name="@emotion/styled", range="^11.3.0")
        assert str(spec) == "@emotion/styled@^11.3.0"

    def test_quoted_range_is_unquoted(self):
        """Quotes around the range are removed."""
        spec = parse_install_spec('react@"^17.0.0 || ^18.0.0"')
        assert spec.range == "^17.0.0 || ^18.0.0"
        assert spec.quoted() == 'react@"^17.0.0 || ^18.0.0"'

    def test_bare_name_renders_without_range(self):
        """A bare name renders without @."""
        spec = parse_install_spec("typescript")
        assert spec.range is None
        assert str(spec) == "typescript"

    def test_empty_name_rejected(self):
        """A blank specifier is rejected."""
        with pytest.raises(ValueError):
            parse_install_spec("   ")


class TestCoerceVersion:
    """Test loose version coercion."""

    @pytest.mark.parametrize("raw,expected", [
        ("1.2.3", "1.2.3"),
        ("v1.2.3", "1.2.3"),
        ("=1.2.3", "1.2.3"),
        ("^1.5.0", "1.5.0"),
        ("~2.1", "2.1.0"),
        ("3", "3.0.0"),
        (">=4.0.0 <5", "4.0.0"),
        ("5.0.0-alpha.161", "5.0.0-alpha.161"),
    ])
    def test_coercion(self, raw, expected):
        """Loose versions coerce to the nearest semantic version."""
        assert coerce_version(raw) == semantic_version.Version(expected)

    @pytest.mark.parametrize("raw", [None, "latest", "workspace:*", "github:user/repo"])
    def test_uncoercible(self, raw):
        """Strings without a version coerce to None."""
        assert coerce_version(raw) is None


class TestParseVersion:
    """Test strict version parsing."""

    def test_returns_coerced_version(self):
        """A coercible string returns its version."""
        assert parse_version("^18.2") == semantic_version.Version("18.2.0")

    def test_raises_when_uncoercible(self):
        """An uncoercible string raises VersionUnparseable."""
        with pytest.raises(VersionUnparseable) as exc:
            parse_version("workspace:*")
        assert exc.value.value == "workspace:*"
