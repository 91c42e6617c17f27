"""
Pytest configuration and shared fixtures for atelier tests.
"""

import os
from pathlib import Path

import httpx
import pytest

from atelier.config import AtelierConfig
from atelier.errors import ProcessFailure
from atelier.process import ProcessResult
from atelier.testing import ScriptedGateway

GLEAM_TOML = """name = "space_game"
version = "1.0.0"

[dependencies]
gleam_stdlib = ">= 0.44.0 and < 2.0.0"

[dev-dependencies]
gleeunit = ">= 1.0.0 and < 2.0.0"
"""

ARCHIVE_SUFFIXES = (".tar.gz", ".zip")


class FakeProcessRunner:
    """Records commands instead of running them.

    Extraction commands (``tar``/``unzip``) create the directory a real NW.js
    archive would unpack to, so install logic can be exercised end to end.
    Commands whose program is listed in ``fail`` raise ``ProcessFailure``.
    """

    def __init__(self, fail: dict[str, str] | None = None, extract: bool = True):
        self.fail = dict(fail or {})
        self.extract = extract
        self.commands: list[list[str]] = []

    async def run(self, args: list[str], cwd: Path) -> ProcessResult:
        self.commands.append(list(args))
        if args[0] in self.fail:
            raise ProcessFailure(args, 1, self.fail[args[0]])
        if self.extract and args[0] in ("tar", "unzip"):
            archive = Path(args[2] if args[0] == "tar" else args[3])
            dest = Path(args[-1])
            stem = archive.name
            for suffix in ARCHIVE_SUFFIXES:
                if stem.endswith(suffix):
                    stem = stem[: -len(suffix)]
            (dest / stem).mkdir(parents=True, exist_ok=True)
            (dest / stem / "nw").write_text("binary")
        return ProcessResult(args=list(args), returncode=0, stdout="", stderr="")


def archive_transport(status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=b"archive-bytes")

    return httpx.MockTransport(handler)


@pytest.fixture
def gleam_project(tmp_path):
    """A freshly created Gleam project: manifest plus an empty src/."""
    (tmp_path / "gleam.toml").write_text(GLEAM_TOML)
    (tmp_path / "src").mkdir()
    return tmp_path


@pytest.fixture
def scripted_gateway():
    return ScriptedGateway()


@pytest.fixture
def fake_runner():
    return FakeProcessRunner()


@pytest.fixture
def config():
    return AtelierConfig()


@pytest.fixture(autouse=True)
def clear_atelier_env(monkeypatch):
    """Keep ATELIER_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("ATELIER_"):
            monkeypatch.delenv(key, raising=False)
