"""
Tests for atelier.cli module.
"""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from atelier.cli import _configure_logging, cli
from atelier.tests.conftest import FakeProcessRunner


@pytest.fixture
def runner():
    return CliRunner()


def _use_runner(monkeypatch, process_runner):
    monkeypatch.setattr("atelier.cli.ProcessRunner", lambda: process_runner)


def _script_keys(monkeypatch, keys):
    pressed = iter(keys)
    monkeypatch.setattr("atelier.cli.click.getchar", lambda: next(pressed))


class TestWizardCommand:
    """Tests for running atelier with no subcommand."""

    def test_outside_project(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ATELIER_ROOT_SEARCH_DEPTH", "0")

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "no gleam.toml found" in result.output

    def test_manifest_without_name(self, runner, tmp_path, monkeypatch):
        (tmp_path / "gleam.toml").write_text('version = "1.0.0"\n')
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "has no 'name' entry" in result.output

    def test_manifest_not_utf8(self, runner, tmp_path, monkeypatch):
        (tmp_path / "gleam.toml").write_bytes(b'name = "g\xff"\n')
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "Error: Could not parse" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_generation_succeeds(self, runner, gleam_project, monkeypatch, fake_runner):
        monkeypatch.chdir(gleam_project)
        _use_runner(monkeypatch, fake_runner)
        _script_keys(monkeypatch, ["\r", "\r", "\r", "\r", "q"])

        result = runner.invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "Your project is ready!" in result.output
        assert (gleam_project / ".gitignore").is_file()
        assert 'target = "javascript"' in (gleam_project / "gleam.toml").read_text()
        assert ["gleam", "deps", "download"] in fake_runner.commands

    def test_generation_failure_exits_non_zero(self, runner, gleam_project, monkeypatch):
        monkeypatch.chdir(gleam_project)
        _use_runner(monkeypatch, FakeProcessRunner(fail={"gleam": "no such package"}))
        _script_keys(monkeypatch, ["\r", "\r", "\r", "\r", "q"])

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "no such package" in result.output
        assert not (gleam_project / ".gitignore").exists()

    def test_interrupt_during_generation(self, runner, gleam_project, monkeypatch):
        class InterruptedRunner(FakeProcessRunner):
            async def run(self, args, cwd):
                raise KeyboardInterrupt

        monkeypatch.chdir(gleam_project)
        _use_runner(monkeypatch, InterruptedRunner())
        _script_keys(monkeypatch, ["\r", "\r", "\r", "\r"])

        result = runner.invoke(cli, [])

        assert result.exit_code == 130
        assert "Interrupted." in result.output
        assert isinstance(result.exception, SystemExit)

    def test_quit_before_generation(self, runner, gleam_project, monkeypatch, fake_runner):
        monkeypatch.chdir(gleam_project)
        _use_runner(monkeypatch, fake_runner)
        _script_keys(monkeypatch, ["\r", "q"])

        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert fake_runner.commands == []


class TestBundleCommand:
    """Tests for `atelier bundle`."""

    def test_requires_existing_bundles(self, runner, gleam_project, monkeypatch):
        monkeypatch.chdir(gleam_project)

        result = runner.invoke(cli, ["bundle"])

        assert result.exit_code == 1
        assert "no desktop bundles found" in result.output

    def test_rebuilds_and_packages(self, runner, gleam_project, monkeypatch, fake_runner):
        (gleam_project / "dist" / "linux").mkdir(parents=True)
        (gleam_project / "dist" / "windows").mkdir(parents=True)
        monkeypatch.chdir(gleam_project)
        _use_runner(monkeypatch, fake_runner)

        result = runner.invoke(cli, ["bundle"])

        assert result.exit_code == 0, result.output
        assert "✓ Ran npm install" in result.output
        assert "✓ Ran gleam run -m lustre/dev build" in result.output
        assert "✓ Packaged 2 platform bundle(s)" in result.output
        assert (gleam_project / "dist" / "windows" / "index.html").is_file()

    def test_build_failure(self, runner, gleam_project, monkeypatch):
        (gleam_project / "dist" / "macos").mkdir(parents=True)
        monkeypatch.chdir(gleam_project)
        _use_runner(monkeypatch, FakeProcessRunner(fail={"gleam": "compile error"}))

        result = runner.invoke(cli, ["bundle"])

        assert result.exit_code == 1
        assert "compile error" in result.output
        assert not (gleam_project / "dist" / "macos" / "index.html").exists()


class TestConfigureLogging:
    """Where log records go for each mode."""

    def test_wizard_without_log_file_stays_quiet(self, config):
        with patch("atelier.cli.logging.basicConfig") as basic_config:
            _configure_logging(config, interactive=True)

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == "WARNING"
        assert [type(h) for h in kwargs["handlers"]] == [logging.NullHandler]

    def test_log_file_used_when_set(self, config, tmp_path):
        config.log_file = str(tmp_path / "atelier.log")
        with patch("atelier.cli.logging.basicConfig") as basic_config:
            _configure_logging(config, interactive=True)

        assert basic_config.call_args.kwargs["filename"] == config.log_file
        assert "handlers" not in basic_config.call_args.kwargs

    def test_bundle_logs_to_stderr(self, config):
        config.log_level = "info"
        with patch("atelier.cli.logging.basicConfig") as basic_config:
            _configure_logging(config)

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == "INFO"
        assert "filename" not in kwargs
        assert "handlers" not in kwargs
