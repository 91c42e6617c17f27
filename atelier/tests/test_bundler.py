"""
Tests for atelier.bundler module.
"""

import json

import httpx
import pytest

from atelier.bundler import (
    bundle_dir,
    existing_bundle_dirs,
    package_platforms,
    run_bundle,
    setup_platform_bundles,
)
from atelier.errors import ArchiveFailure, ProcessFailure
from atelier.model import Platform
from atelier.sdk import Downloader, SdkInstaller
from atelier.tests.conftest import FakeProcessRunner

PLATFORM_DIRS = ["linux", "macos", "windows"]


def _installer(runner, fail_token=None, requested=None):
    def handler(request):
        if requested is not None:
            requested.append(request.url.path.rsplit("/", 1)[-1])
        if fail_token and fail_token in str(request.url):
            return httpx.Response(404)
        return httpx.Response(200, content=b"archive-bytes")

    return SdkInstaller(
        runner,
        Downloader(transport=httpx.MockTransport(handler)),
        version="0.92.0",
        base_url="https://dl.nwjs.io",
    )


class TestSetupPlatformBundles:
    """Tests for preparing the three desktop bundle directories."""

    @pytest.mark.asyncio
    async def test_creates_all_platforms(self, gleam_project, fake_runner, config):
        requested = []
        installer = _installer(fake_runner, requested=requested)

        created = await setup_platform_bundles(gleam_project, "space_game", installer, config)

        assert [p.name for p in created] == PLATFORM_DIRS
        for name in PLATFORM_DIRS:
            out = gleam_project / "dist" / name
            assert (out / "nwjs").is_dir()
            assert json.loads((out / "package.json").read_text())["name"] == "space_game"
        assert requested == [
            "nwjs-v0.92.0-linux-x64.tar.gz",
            "nwjs-v0.92.0-osx-x64.zip",
            "nwjs-v0.92.0-win-x64.zip",
        ]

    @pytest.mark.asyncio
    async def test_writes_package_descriptor(self, gleam_project, fake_runner, config):
        config.window_width = 800
        config.window_height = 600

        await setup_platform_bundles(
            gleam_project, "space_game", _installer(fake_runner), config
        )

        descriptor = json.loads((gleam_project / "package.json").read_text())
        assert descriptor["main"] == "index.html"
        assert descriptor["window"] == {"title": "space_game", "width": 800, "height": 600}
        assert set(descriptor["dependencies"]) == {"three", "@dimforge/rapier3d-compat"}

    @pytest.mark.asyncio
    async def test_stops_at_first_failing_platform(self, gleam_project, fake_runner, config):
        installer = _installer(fake_runner, fail_token="-osx-")

        with pytest.raises(ArchiveFailure):
            await setup_platform_bundles(gleam_project, "space_game", installer, config)

        assert (bundle_dir(gleam_project, Platform.LINUX) / "nwjs").is_dir()
        assert not (bundle_dir(gleam_project, Platform.MACOS) / "nwjs").exists()
        assert not bundle_dir(gleam_project, Platform.WINDOWS).exists()

    @pytest.mark.asyncio
    async def test_rerun_after_failure_completes(self, gleam_project, fake_runner, config):
        with pytest.raises(ArchiveFailure):
            await setup_platform_bundles(
                gleam_project, "space_game", _installer(fake_runner, "-win-"), config
            )

        await setup_platform_bundles(
            gleam_project, "space_game", _installer(fake_runner), config
        )

        for name in PLATFORM_DIRS:
            out = gleam_project / "dist" / name
            assert sorted(p.name for p in out.iterdir()) == ["nwjs", "package.json"]


class TestPackagePlatforms:
    def _bundle(self, root):
        for name in PLATFORM_DIRS:
            (root / "dist" / name).mkdir(parents=True)

    def test_copies_app_files(self, gleam_project):
        self._bundle(gleam_project)
        (gleam_project / "index.html").write_text("<html>custom</html>")
        static = gleam_project / "priv" / "static"
        static.mkdir(parents=True)
        (static / "space_game.mjs").write_text("export {}")
        (gleam_project / "package.json").write_text('{"name": "space_game"}')

        targets = package_platforms(gleam_project, "space_game")

        assert len(targets) == 3
        for out in targets:
            assert (out / "index.html").read_text() == "<html>custom</html>"
            assert (out / "priv" / "static" / "space_game.mjs").is_file()
            assert (out / "package.json").is_file()

    def test_renders_default_index(self, gleam_project):
        self._bundle(gleam_project)

        package_platforms(gleam_project, "space_game")

        index = (gleam_project / "dist" / "linux" / "index.html").read_text()
        assert "./priv/static/space_game.mjs" in index
        assert "{{project_name}}" not in index

    def test_only_existing_bundles(self, gleam_project):
        (gleam_project / "dist" / "windows").mkdir(parents=True)
        assert [p.name for p in existing_bundle_dirs(gleam_project)] == ["windows"]
        assert [p.name for p in package_platforms(gleam_project, "space_game")] == ["windows"]


class TestRunBundle:
    """Tests for the non-interactive rebuild."""

    @pytest.mark.asyncio
    async def test_runs_build_then_compile_then_packages(self, gleam_project, fake_runner, config):
        (gleam_project / "dist" / "linux").mkdir(parents=True)
        stages = []

        targets = await run_bundle(
            gleam_project, "space_game", fake_runner, config, on_stage=stages.append
        )

        assert fake_runner.commands == [
            ["npm", "install"],
            ["gleam", "run", "-m", "lustre/dev", "build"],
        ]
        assert [p.name for p in targets] == ["linux"]
        assert stages[-1] == "Packaged 1 platform bundle(s)"
        assert len(stages) == 3

    @pytest.mark.asyncio
    async def test_build_failure_stops_before_compile(self, gleam_project, config):
        runner = FakeProcessRunner(fail={"npm": "npm ERR! code ENOENT"})

        with pytest.raises(ProcessFailure, match="ENOENT"):
            await run_bundle(gleam_project, "space_game", runner, config)
        assert runner.commands == [["npm", "install"]]
