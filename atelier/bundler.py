"""Per-platform desktop bundles.

Layout produced under the project root::

    package.json
    dist/linux/{nwjs/, package.json, ...}
    dist/macos/{nwjs/, package.json, ...}
    dist/windows/{nwjs/, package.json, ...}
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from atelier.config import AtelierConfig
from atelier.errors import IOFailure
from atelier.model import Host, Platform
from atelier.process import ProcessRunner
from atelier.scaffold import (
    PACKAGE_DESCRIPTOR,
    TEMPLATE_DIR,
    package_descriptor,
    render_template,
    write_package_descriptor,
)
from atelier.sdk import RUNTIME_DIR_NAME, SdkInstaller

logger = logging.getLogger(__name__)

BUNDLE_ROOT = "dist"
BUNDLE_PLATFORMS = (Platform.LINUX, Platform.MACOS, Platform.WINDOWS)


def bundle_dir(root: Path, target: Platform) -> Path:
    return root / BUNDLE_ROOT / target.value


def existing_bundle_dirs(root: Path) -> list[Path]:
    return [
        bundle_dir(root, target)
        for target in BUNDLE_PLATFORMS
        if bundle_dir(root, target).is_dir()
    ]


def _copy_file(src: Path, dest: Path) -> None:
    try:
        shutil.copy2(src, dest)
    except OSError as e:
        raise IOFailure(f"Could not copy {src} to {dest}: {e}") from e


async def setup_platform_bundles(
    root: Path,
    project_name: str,
    installer: SdkInstaller,
    config: AtelierConfig,
) -> list[Path]:
    """Write package.json and populate one bundle directory per platform.

    Stops at the first platform that fails; directories already populated are
    left in place and are rebuilt cleanly on the next run.
    """
    descriptor = package_descriptor(
        project_name,
        bundle_for_desktop=True,
        window_width=config.window_width,
        window_height=config.window_height,
    )
    descriptor_path = write_package_descriptor(root, descriptor)

    created = []
    for target in BUNDLE_PLATFORMS:
        out = bundle_dir(root, target)
        try:
            out.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"Could not create {out}: {e}") from e
        host = Host(platform=target, architecture=config.bundle_architecture)
        await installer.install(host, out, RUNTIME_DIR_NAME, sdk=False)
        _copy_file(descriptor_path, out / PACKAGE_DESCRIPTOR)
        logger.info(f"Prepared {target.value} bundle in {out}")
        created.append(out)
    return created


def package_platforms(root: Path, project_name: str) -> list[Path]:
    """Copy the compiled web app into every existing bundle directory."""
    targets = existing_bundle_dirs(root)
    index = root / "index.html"
    static = root / "priv" / "static"
    descriptor = root / PACKAGE_DESCRIPTOR

    for out in targets:
        if index.is_file():
            _copy_file(index, out / "index.html")
        else:
            content = render_template(
                (TEMPLATE_DIR / "index.html").read_text(encoding="utf-8"),
                project_name=project_name,
            )
            try:
                (out / "index.html").write_text(content, encoding="utf-8")
            except OSError as e:
                raise IOFailure(f"Could not write {out / 'index.html'}: {e}") from e
        if static.is_dir():
            try:
                shutil.copytree(static, out / "priv" / "static", dirs_exist_ok=True)
            except (OSError, shutil.Error) as e:
                raise IOFailure(f"Could not copy {static} to {out}: {e}") from e
        if descriptor.is_file():
            _copy_file(descriptor, out / PACKAGE_DESCRIPTOR)
        logger.info(f"Packaged app into {out}")
    return targets


async def run_bundle(
    root: Path,
    project_name: str,
    runner: ProcessRunner,
    config: AtelierConfig,
    on_stage: Callable[[str], None] | None = None,
) -> list[Path]:
    """Rebuild the app and refresh every platform bundle (no downloads)."""

    def stage(message: str) -> None:
        if on_stage is not None:
            on_stage(message)

    await runner.run(config.runtime_build_command, cwd=root)
    stage(f"Ran {' '.join(config.runtime_build_command)}")
    await runner.run(config.compile_command, cwd=root)
    stage(f"Ran {' '.join(config.compile_command)}")
    targets = package_platforms(root, project_name)
    stage(f"Packaged {len(targets)} platform bundle(s)")
    return targets
