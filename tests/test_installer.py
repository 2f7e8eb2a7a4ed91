"""Tests for the subprocess installer and node_modules version reading."""

import json
import logging
import subprocess

import pytest

from errors import VerificationFailure
from fix.installer import INSTALL_COMMANDS, SubprocessInstaller, get_install_command
from registry.installed import read_installed_versions


def _install_pkg(root, name, version):
    pkg_dir = root / "node_modules" / name
    pkg_dir.mkdir(parents=True)
    (pkg_dir / "package.json").write_text(json.dumps({"name": name, "version": version}))


class FakeRunner:
    """Stands in for subprocess.run."""

    def __init__(self, returncode=0, raises=None):
        self.returncode = returncode
        self.raises = raises
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr="boom")


class TestInstallCommands:
    """Test the per-manager command table."""

    def test_all_supported_managers_configured(self):
        """Every supported manager has a command."""
        assert set(INSTALL_COMMANDS) == {"npm", "yarn", "pnpm", "bun"}

    def test_unknown_manager_falls_back_to_npm(self, caplog):
        """An unknown manager falls back to npm with a warning."""
        with caplog.at_level(logging.WARNING):
            assert get_install_command("deno") is INSTALL_COMMANDS["npm"]
        assert "Unknown package manager" in caplog.text


class TestSubprocessInstaller:
    """Test running the package manager."""

    def test_runs_in_project_directory(self, tmp_path):
        """Installs run strict in the project directory."""
        runner = FakeRunner()
        installer = SubprocessInstaller(str(tmp_path), runner=runner)
        assert installer.install("npm", ["react@^18.0.0"]) is True
        cmd, kwargs = runner.calls[0]
        assert cmd == ["npm", "install", "--strict-peer-deps", "react@^18.0.0"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["check"] is False

    def test_relaxed_flags(self, tmp_path):
        """Relaxed installs use the legacy peer flag."""
        runner = FakeRunner()
        SubprocessInstaller(str(tmp_path), runner=runner).install("npm", ["react@^18.0.0"], relaxed=True)
        assert runner.calls[0][0] == ["npm", "install", "--legacy-peer-deps", "react@^18.0.0"]

    def test_nonzero_exit_is_failure(self, tmp_path):
        """A non-zero exit status is a failure."""
        installer = SubprocessInstaller(str(tmp_path), runner=FakeRunner(returncode=1))
        assert installer.install("npm", ["react@^18.0.0"]) is False

    def test_missing_binary_is_failure(self, tmp_path):
        """A missing binary is a failure."""
        installer = SubprocessInstaller(str(tmp_path), runner=FakeRunner(raises=FileNotFoundError("bun")))
        assert installer.install("bun", ["react@^18.0.0"]) is False

    def test_timeout_is_failure(self, tmp_path):
        """A timeout is a failure."""
        runner = FakeRunner(raises=subprocess.TimeoutExpired(["npm"], 600))
        assert SubprocessInstaller(str(tmp_path), runner=runner).install("npm", ["a"]) is False

    def test_list_installed_reads_node_modules(self, tmp_path):
        """Installed versions come from node_modules, scoped included."""
        _install_pkg(tmp_path, "react", "18.2.0")
        _install_pkg(tmp_path, "@emotion/react", "11.11.3")
        installed = SubprocessInstaller(str(tmp_path)).list_installed("npm")
        assert installed == {"@emotion/react": "11.11.3", "react": "18.2.0"}

    def test_list_installed_without_node_modules(self, tmp_path):
        """No node_modules is a VerificationFailure."""
        with pytest.raises(VerificationFailure):
            SubprocessInstaller(str(tmp_path)).list_installed("npm")


class TestReadInstalledVersions:
    """Test node_modules version reading."""

    def test_skips_unreadable_and_hidden_entries(self, tmp_path):
        """Broken and dot entries are skipped."""
        _install_pkg(tmp_path, "ok", "1.0.0")
        broken = tmp_path / "node_modules" / "broken"
        broken.mkdir()
        (broken / "package.json").write_text("{")
        (tmp_path / "node_modules" / ".bin").mkdir()
        assert read_installed_versions(str(tmp_path)) == {"ok": "1.0.0"}

    def test_no_node_modules(self, tmp_path):
        """No node_modules yields an empty map."""
        assert read_installed_versions(str(tmp_path)) == {}
