"""Host detection and NW.js archive download/extraction.

Archive names encode version, platform and architecture, e.g.
``nwjs-sdk-v0.92.0-linux-x64.tar.gz`` or ``nwjs-v0.92.0-win-x64.zip``.
Installing an archive always ends with a single directory of a fixed name:
any previous copy is removed before the freshly extracted one is renamed.
"""

import logging
import platform as platform_module
import shutil
from pathlib import Path

import httpx

from atelier.errors import ArchiveFailure, IOFailure, ProcessFailure, UnsupportedPlatform
from atelier.model import Architecture, Host, Platform
from atelier.process import ProcessRunner

logger = logging.getLogger(__name__)

SDK_DIR_NAME = "nwjs-sdk"
RUNTIME_DIR_NAME = "nwjs"

_OS_TOKENS = {
    Platform.LINUX: "linux",
    Platform.MACOS: "osx",
    Platform.WINDOWS: "win",
}

_ARCH_TOKENS = {
    Architecture.X64: "x64",
    Architecture.ARM64: "arm64",
    Architecture.AARCH64: "arm64",
}


def parse_platform(system: str, strict: bool = False) -> Platform:
    """Map a host OS identifier (``platform.system()`` or ``sys.platform``).

    Anything that is not recognisably Windows or macOS is treated as Linux
    unless ``strict`` is set, in which case unknown values raise.
    """
    value = system.strip().lower()
    if value.startswith("win") or value.startswith("cygwin") or value.startswith("msys"):
        return Platform.WINDOWS
    if value in ("darwin", "macos", "mac", "osx"):
        return Platform.MACOS
    if value.startswith("linux"):
        return Platform.LINUX
    if strict:
        raise UnsupportedPlatform(f"Unsupported host platform: {system!r}")
    logger.warning(f"Unrecognised host platform {system!r}, assuming Linux")
    return Platform.LINUX


def parse_architecture(machine: str, strict: bool = False) -> Architecture:
    value = machine.strip().lower()
    if value in ("x86_64", "amd64", "x64"):
        return Architecture.X64
    if value == "arm64":
        return Architecture.ARM64
    if value in ("aarch64", "armv8", "armv8l"):
        return Architecture.AARCH64
    if strict:
        raise UnsupportedPlatform(f"Unsupported host architecture: {machine!r}")
    logger.warning(f"Unrecognised host architecture {machine!r}, assuming x64")
    return Architecture.X64


def detect_host(
    system: str | None = None, machine: str | None = None, strict: bool = False
) -> Host:
    system = platform_module.system() if system is None else system
    machine = platform_module.machine() if machine is None else machine
    return Host(
        platform=parse_platform(system, strict=strict),
        architecture=parse_architecture(machine, strict=strict),
    )


def archive_extension(target: Platform) -> str:
    return ".tar.gz" if target == Platform.LINUX else ".zip"


def archive_stem(version: str, host: Host, sdk: bool) -> str:
    flavour = "nwjs-sdk" if sdk else "nwjs"
    return (
        f"{flavour}-v{version}-{_OS_TOKENS[host.platform]}-"
        f"{_ARCH_TOKENS[host.architecture]}"
    )


def archive_name(version: str, host: Host, sdk: bool) -> str:
    return archive_stem(version, host, sdk) + archive_extension(host.platform)


def archive_url(base_url: str, version: str, name: str) -> str:
    return f"{base_url.rstrip('/')}/v{version}/{name}"


class Downloader:
    """Streams a URL to a local file with ``httpx``."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, url: str, dest: Path) -> Path:
        logger.info(f"Downloading {url} -> {dest}")
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    with open(dest, "wb") as fh:
                        async for chunk in response.aiter_bytes():
                            fh.write(chunk)
        except httpx.HTTPError as e:
            dest.unlink(missing_ok=True)
            raise ArchiveFailure(f"Download of {url} failed: {e}") from e
        except OSError as e:
            dest.unlink(missing_ok=True)
            raise IOFailure(f"Could not write {dest}: {e}") from e

        if not dest.is_file():
            raise ArchiveFailure(f"Download of {url} produced no file")
        return dest


class SdkInstaller:
    """Download, extract and rename one NW.js archive into a directory."""

    def __init__(
        self,
        runner: ProcessRunner,
        downloader: Downloader,
        version: str,
        base_url: str,
    ) -> None:
        self._runner = runner
        self._downloader = downloader
        self.version = version
        self.base_url = base_url

    async def extract(self, archive: Path, dest_dir: Path) -> None:
        if archive.name.endswith(".zip"):
            command = ["unzip", "-q", "-o", str(archive), "-d", str(dest_dir)]
        else:
            command = ["tar", "-xzf", str(archive), "-C", str(dest_dir)]
        try:
            await self._runner.run(command, cwd=dest_dir)
        except ProcessFailure as e:
            raise ArchiveFailure(f"Could not extract {archive.name}: {e}") from e

    async def install(
        self, host: Host, dest_dir: Path, target_name: str, sdk: bool
    ) -> Path:
        """Leave exactly one ``dest_dir/target_name`` holding the extracted runtime."""
        name = archive_name(self.version, host, sdk)
        archive = dest_dir / name
        await self._downloader.fetch(archive_url(self.base_url, self.version, name), archive)
        if not archive.is_file():
            raise ArchiveFailure(f"{archive} is missing after download")

        extracted = dest_dir / archive_stem(self.version, host, sdk)
        try:
            await self.extract(archive, dest_dir)
            if not extracted.is_dir():
                raise ArchiveFailure(f"{name} did not contain {extracted.name}/")
        except ArchiveFailure:
            archive.unlink(missing_ok=True)
            raise

        target = dest_dir / target_name
        try:
            if target.exists():
                logger.info(f"Replacing existing {target}")
                shutil.rmtree(target)
            extracted.rename(target)
            archive.unlink()
        except OSError as e:
            raise IOFailure(f"Could not move {extracted} to {target}: {e}") from e
        logger.info(f"Installed {name} as {target}")
        return target
