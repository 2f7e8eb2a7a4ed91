"""Tests for config file loading, validation and CLI precedence."""

import json

import pytest

from args import parse_args
from config import Settings, build_settings, load_config, validate_config
from constants import Constants
from errors import ConfigError


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PEERFIX_CONFIG", raising=False)


class TestLoadConfig:
    """Test config file discovery and parsing."""

    def test_no_config_is_empty(self):
        """Without a config file the result is empty."""
        assert load_config() == {}

    def test_yaml_file(self, tmp_path):
        """A YAML config is parsed."""
        path = tmp_path / "peerfix.yml"
        path.write_text("batch_size: 5\nsource: lockfile\nignore_patterns:\n  - '^@internal/'\n")
        assert load_config(str(path)) == {
            "batch_size": 5,
            "source": "lockfile",
            "ignore_patterns": ["^@internal/"],
        }

    def test_json_file(self, tmp_path):
        """A JSON config is parsed."""
        path = tmp_path / "peerfix.json"
        path.write_text(json.dumps({"manager": "pnpm"}))
        assert load_config(str(path)) == {"manager": "pnpm"}

    def test_dotfile_discovered_in_cwd(self, tmp_path):
        """.peerfix.yml in the working directory is found."""
        (tmp_path / ".peerfix.yml").write_text("max_workers: 2\n")
        assert load_config() == {"max_workers": 2}

    def test_env_var(self, tmp_path, monkeypatch):
        """PEERFIX_CONFIG names the config file."""
        path = tmp_path / "custom.yaml"
        path.write_text("optional_peers: [encoding]\n")
        monkeypatch.setenv("PEERFIX_CONFIG", str(path))
        assert load_config() == {"optional_peers": ["encoding"]}

    def test_missing_explicit_file(self, tmp_path):
        """A missing explicit config file is a ConfigError."""
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path):
        """Invalid YAML is a ConfigError."""
        path = tmp_path / "bad.yml"
        path.write_text("batch_size: [1, 2\n")
        with pytest.raises(ConfigError):
            load_config(str(path))


class TestValidateConfig:
    """Test config schema validation."""

    @pytest.mark.parametrize("data", [
        {"unknown_key": 1},
        {"batch_size": 0},
        {"batch_size": "ten"},
        {"source": "git"},
        {"manager": "deno"},
        {"ignore_patterns": ["("]},
    ])
    def test_rejects(self, data):
        """Invalid keys and values are rejected."""
        with pytest.raises(ConfigError):
            validate_config(data)

    def test_accepts_full_config(self):
        """A config using every key is accepted."""
        validate_config({
            "ignore_patterns": ["^@types/"],
            "optional_peers": ["encoding"],
            "batch_size": 20,
            "max_workers": 4,
            "source": "registry",
            "manager": "yarn",
            "registry_url": "https://registry.example.test/",
        })


class TestBuildSettings:
    """Test merging defaults, config and CLI flags."""

    def test_defaults(self):
        """No config and no flags yield the defaults."""
        settings = build_settings(parse_args([]), {})
        assert settings == Settings()
        assert settings.ignore_patterns == Constants.IGNORE_PATTERNS
        assert settings.manager is None

    def test_config_overrides_defaults(self):
        """Config values replace defaults."""
        settings = build_settings(parse_args([]), {"batch_size": 3, "source": "lockfile"})
        assert settings.batch_size == 3
        assert settings.source == "lockfile"

    def test_cli_overrides_config(self):
        """CLI flags replace config values."""
        args = parse_args(["--batch-size", "7", "--source", "registry", "--manager", "bun"])
        settings = build_settings(args, {"batch_size": 3, "source": "lockfile", "manager": "pnpm"})
        assert (settings.batch_size, settings.source, settings.manager) == (7, "registry", "bun")

    def test_cli_lists_extend_config(self):
        """--ignore and --optional extend the configured lists."""
        args = parse_args(["--ignore", "^@internal/", "--optional", "fsevents"])
        settings = build_settings(args, {"optional_peers": ["encoding"]})
        assert settings.ignore_patterns[-1] == "^@internal/"
        assert settings.optional_peers == ["encoding", "fsevents"]

    def test_invalid_cli_pattern(self):
        """An invalid --ignore regex is a ConfigError."""
        with pytest.raises(ConfigError):
            build_settings(parse_args(["--ignore", "[a-"]), {})

    def test_defaults_are_not_shared(self):
        """Extending one run's lists leaves the defaults untouched."""
        first = build_settings(parse_args(["--ignore", "^x"]), {})
        assert "^x" not in build_settings(parse_args([]), {}).ignore_patterns
        assert "^x" not in Constants.IGNORE_PATTERNS
        assert first.ignore_patterns[-1] == "^x"


class TestParseArgs:
    """Test argument parsing."""

    def test_batch_size_must_be_positive(self):
        """A zero batch size is rejected."""
        with pytest.raises(SystemExit):
            parse_args(["--batch-size", "0"])

    def test_manager_is_case_insensitive(self):
        """Manager names are lowercased."""
        assert parse_args(["--manager", "PNPM"]).MANAGER == "pnpm"

    def test_version_flag(self, capsys):
        """--version prints the version and exits 0."""
        with pytest.raises(SystemExit) as exc:
            parse_args(["--version"])
        assert exc.value.code == 0
        assert "peerfix v" in capsys.readouterr().out
