"""
Tests for atelier.config module.
"""

from atelier.config import (
    AtelierConfig,
    config_from_mapping,
    load_atelier_toml,
    load_config,
)
from atelier.model import Architecture


class TestAtelierConfig:
    """Tests for AtelierConfig defaults."""

    def test_defaults(self):
        config = AtelierConfig()
        assert config.sdk_version == "0.92.0"
        assert config.sdk_base_url == "https://dl.nwjs.io"
        assert config.download_timeout is None
        assert config.strict_platform_detection is False
        assert config.compile_command == ["gleam", "run", "-m", "lustre/dev", "build"]

    def test_list_defaults_not_shared(self):
        a, b = AtelierConfig(), AtelierConfig()
        a.dev_tooling_command.append("--verbose")
        assert b.dev_tooling_command == ["gleam", "deps", "download"]


class TestLoadAtelierToml:
    """Tests for atelier.toml discovery and ATELIER_* overrides."""

    def test_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_atelier_toml() == {}

    def test_cwd_file(self, tmp_path, monkeypatch):
        (tmp_path / "atelier.toml").write_text(
            '[atelier]\nsdk_version = "0.93.0"\nwindow_width = 1920\n'
        )
        monkeypatch.chdir(tmp_path)

        assert load_atelier_toml() == {"sdk_version": "0.93.0", "window_width": 1920}

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        (tmp_path / "atelier.toml").write_text('[atelier]\nsdk_version = "cwd"\n')
        other = tmp_path / "other.toml"
        other.write_text('[atelier]\nsdk_version = "explicit"\n')
        monkeypatch.chdir(tmp_path)

        assert load_atelier_toml(str(other))["sdk_version"] == "explicit"

    def test_env_config_path(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.toml"
        path.write_text('[atelier]\nlog_level = "DEBUG"\n')
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ATELIER_CONFIG", str(path))

        result = load_atelier_toml()

        assert result == {"log_level": "DEBUG"}

    def test_env_overrides(self, tmp_path, monkeypatch):
        (tmp_path / "atelier.toml").write_text('[atelier]\nwindow_width = 1920\n')
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ATELIER_WINDOW_WIDTH", "640")
        monkeypatch.setenv("ATELIER_STRICT_PLATFORM_DETECTION", "yes")
        monkeypatch.setenv("ATELIER_DOWNLOAD_TIMEOUT", "30.5")
        monkeypatch.setenv("ATELIER_COMPILE_COMMAND", "gleam run -m lustre/dev build --minify")

        result = load_atelier_toml()

        assert result["window_width"] == 640
        assert result["strict_platform_detection"] is True
        assert result["download_timeout"] == 30.5
        assert result["compile_command"][-1] == "--minify"

    def test_bad_number_ignored(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ATELIER_WINDOW_HEIGHT", "tall")
        assert "window_height" not in load_atelier_toml()


class TestConfigFromMapping:
    def test_unknown_keys_ignored(self):
        config = config_from_mapping({"sdk_version": "0.90.0", "colour": "blue"})
        assert config.sdk_version == "0.90.0"

    def test_architecture_converted(self):
        config = config_from_mapping({"bundle_architecture": "arm64"})
        assert config.bundle_architecture == Architecture.ARM64

    def test_load_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ATELIER_SDK_VERSION", "0.94.0")
        assert load_config().sdk_version == "0.94.0"
