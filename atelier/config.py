import os
import shlex
import tomllib
from dataclasses import dataclass, field, fields
from typing import Any

from atelier.model import Architecture

DEFAULT_SDK_VERSION = "0.92.0"
DEFAULT_SDK_BASE_URL = "https://dl.nwjs.io"


@dataclass
class AtelierConfig:
    # NW.js runtime
    sdk_version: str = DEFAULT_SDK_VERSION
    sdk_base_url: str = DEFAULT_SDK_BASE_URL
    bundle_architecture: Architecture = Architecture.X64
    download_timeout: float | None = None  # None = wait indefinitely
    # Desktop window written to package.json
    window_width: int = 1280
    window_height: int = 720
    # External commands
    dev_tooling_command: list[str] = field(
        default_factory=lambda: ["gleam", "deps", "download"]
    )
    runtime_packages_command: list[str] = field(
        default_factory=lambda: [
            "npm",
            "install",
            "three@0.180.0",
            "@dimforge/rapier3d-compat@0.11.2",
        ]
    )
    runtime_build_command: list[str] = field(
        default_factory=lambda: ["npm", "install"]
    )
    compile_command: list[str] = field(
        default_factory=lambda: ["gleam", "run", "-m", "lustre/dev", "build"]
    )
    # Host detection: fail on unknown hosts instead of assuming Linux
    strict_platform_detection: bool = False
    root_search_depth: int = 16
    # Observability
    log_level: str = "WARNING"
    log_file: str | None = None
    enable_otel: bool = False


_BOOL_KEYS = {"strict_platform_detection", "enable_otel"}
_INT_KEYS = {"window_width", "window_height", "root_search_depth"}
_FLOAT_KEYS = {"download_timeout"}
_LIST_KEYS = {
    "dev_tooling_command",
    "runtime_packages_command",
    "runtime_build_command",
    "compile_command",
}


def load_atelier_toml(path: str | None = None) -> dict[str, Any]:
    """Load an ``atelier.toml`` configuration file.

    Searches (in order):
    1. The explicit ``path`` argument.
    2. ``$ATELIER_CONFIG`` environment variable.
    3. ``atelier.toml`` in the current working directory.

    Returns an empty dict (plus env overrides) if no file is found.

    The TOML file can contain an ``[atelier]`` section with any of the
    ``AtelierConfig`` field names:

    .. code-block:: toml

        [atelier]
        sdk_version = "0.92.0"
        window_width = 1920
        window_height = 1080
        compile_command = ["gleam", "run", "-m", "lustre/dev", "build", "--minify"]
        log_file = "atelier.log"

    Environment variables prefixed with ``ATELIER_`` override TOML values (e.g.
    ``ATELIER_SDK_VERSION=0.93.0``).  List-valued keys are split shell-style.
    """
    candidates = [
        path,
        os.getenv("ATELIER_CONFIG"),
        "atelier.toml",
    ]
    for candidate in candidates:
        if candidate and os.path.exists(candidate):
            with open(candidate, "rb") as fh:
                data = tomllib.load(fh)
            result: dict[str, Any] = data.get("atelier", {})
            _apply_env_overrides(result)
            return result

    result = {}
    _apply_env_overrides(result)
    return result


def _apply_env_overrides(cfg: dict[str, Any]) -> None:
    """Apply ``ATELIER_*`` environment variables on top of cfg dict (in-place)."""
    for env_key, env_val in os.environ.items():
        if not env_key.startswith("ATELIER_") or env_key == "ATELIER_CONFIG":
            continue
        cfg_key = env_key[len("ATELIER_"):].lower()
        if cfg_key in _BOOL_KEYS:
            cfg[cfg_key] = env_val.lower() in ("1", "true", "yes")
        elif cfg_key in _INT_KEYS:
            try:
                cfg[cfg_key] = int(env_val)
            except ValueError:
                pass
        elif cfg_key in _FLOAT_KEYS:
            try:
                cfg[cfg_key] = float(env_val)
            except ValueError:
                pass
        elif cfg_key in _LIST_KEYS:
            cfg[cfg_key] = shlex.split(env_val)
        else:
            cfg[cfg_key] = env_val


def config_from_mapping(values: dict[str, Any]) -> AtelierConfig:
    """Build an ``AtelierConfig`` from a loaded mapping, ignoring unknown keys."""
    known = {f.name for f in fields(AtelierConfig)}
    kwargs = {k: v for k, v in values.items() if k in known}
    if "bundle_architecture" in kwargs:
        kwargs["bundle_architecture"] = Architecture(kwargs["bundle_architecture"])
    return AtelierConfig(**kwargs)


def load_config(path: str | None = None) -> AtelierConfig:
    return config_from_mapping(load_atelier_toml(path))
