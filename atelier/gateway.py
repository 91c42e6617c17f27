"""Boundary between the step sequencer and the outside world.

``Gateway`` declares one coroutine per step kind.  ``perform`` looks up the
handler for an action's type in a table built once at construction and turns
any reported failure into a ``Failure`` value, so the sequencer never has to
know what went wrong, only that something did.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from atelier import bundler, manifest, scaffold
from atelier.config import AtelierConfig
from atelier.errors import AtelierError, UnknownStep
from atelier.model import (
    DetectPlatform,
    DownloadSdk,
    Failure,
    GenerationContext,
    Host,
    InstallDevTooling,
    InstallRuntimePackages,
    SetupPlatformBundles,
    Template,
    UpdateManifest,
    WriteIgnoreFile,
    WriteMainSourceFile,
)
from atelier.process import ProcessRunner
from atelier.sdk import SDK_DIR_NAME, Downloader, SdkInstaller, detect_host

logger = logging.getLogger(__name__)

Handler = Callable[[Any, GenerationContext], Awaitable[None]]


class Gateway(ABC):
    def __init__(self) -> None:
        self._handlers: dict[type, Handler] = {
            UpdateManifest: self._on_update_manifest,
            InstallDevTooling: self._on_install_dev_tooling,
            InstallRuntimePackages: self._on_install_runtime_packages,
            WriteIgnoreFile: self._on_write_ignore_file,
            WriteMainSourceFile: self._on_write_main_source_file,
            DetectPlatform: self._on_detect_platform,
            DownloadSdk: self._on_download_sdk,
            SetupPlatformBundles: self._on_setup_platform_bundles,
        }

    async def perform(self, action: Any, context: GenerationContext) -> Failure | None:
        """Run the operation for ``action``.

        Returns None on success or a ``Failure`` carrying the reason.  Raises
        ``UnknownStep`` when no handler exists for the action's type.
        """
        handler = self._handlers.get(type(action))
        if handler is None:
            raise UnknownStep(getattr(action, "kind", type(action).__name__))
        try:
            await handler(action, context)
        except UnknownStep:
            raise
        except (AtelierError, OSError) as e:
            logger.warning(f"{action.kind} failed: {e}")
            return Failure(reason=str(e))
        return None

    # ------------------------------------------------------------------
    # Dispatch table entries
    # ------------------------------------------------------------------

    async def _on_update_manifest(self, action: UpdateManifest, context: GenerationContext) -> None:
        await self.update_manifest(action.project_name, action.include_ui_overlay)

    async def _on_install_dev_tooling(self, action: InstallDevTooling, context: GenerationContext) -> None:
        await self.install_dev_tooling()

    async def _on_install_runtime_packages(
        self, action: InstallRuntimePackages, context: GenerationContext
    ) -> None:
        await self.install_runtime_packages()

    async def _on_write_ignore_file(self, action: WriteIgnoreFile, context: GenerationContext) -> None:
        await self.write_ignore_file()

    async def _on_write_main_source_file(
        self, action: WriteMainSourceFile, context: GenerationContext
    ) -> None:
        await self.write_main_source_file(action.project_name, action.template)

    async def _on_detect_platform(self, action: DetectPlatform, context: GenerationContext) -> None:
        context.host = await self.detect_platform()

    async def _on_download_sdk(self, action: DownloadSdk, context: GenerationContext) -> None:
        if context.host is None:
            context.host = await self.detect_platform()
        await self.download_and_extract_sdk(context.host)

    async def _on_setup_platform_bundles(
        self, action: SetupPlatformBundles, context: GenerationContext
    ) -> None:
        await self.setup_platform_bundles(action.project_name)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def update_manifest(self, project_name: str, include_ui_overlay: bool) -> None:
        pass

    @abstractmethod
    async def install_dev_tooling(self) -> None:
        pass

    @abstractmethod
    async def install_runtime_packages(self) -> None:
        pass

    @abstractmethod
    async def write_ignore_file(self) -> None:
        pass

    @abstractmethod
    async def write_main_source_file(self, project_name: str, template: Template) -> None:
        pass

    @abstractmethod
    async def detect_platform(self) -> Host:
        pass

    @abstractmethod
    async def download_and_extract_sdk(self, host: Host) -> None:
        pass

    @abstractmethod
    async def setup_platform_bundles(self, project_name: str) -> None:
        pass


class LocalGateway(Gateway):
    """Performs every step against a project directory on this machine."""

    def __init__(
        self,
        project_root: Path,
        config: AtelierConfig,
        runner: ProcessRunner | None = None,
        downloader: Downloader | None = None,
    ) -> None:
        super().__init__()
        self.project_root = project_root
        self.config = config
        self.runner = runner or ProcessRunner()
        self.installer = SdkInstaller(
            self.runner,
            downloader or Downloader(timeout=config.download_timeout),
            version=config.sdk_version,
            base_url=config.sdk_base_url,
        )

    async def update_manifest(self, project_name: str, include_ui_overlay: bool) -> None:
        manifest.update_manifest(self.project_root, project_name, include_ui_overlay)

    async def install_dev_tooling(self) -> None:
        await self.runner.run(self.config.dev_tooling_command, cwd=self.project_root)

    async def install_runtime_packages(self) -> None:
        await self.runner.run(self.config.runtime_packages_command, cwd=self.project_root)

    async def write_ignore_file(self) -> None:
        scaffold.write_ignore_file(self.project_root)

    async def write_main_source_file(self, project_name: str, template: Template) -> None:
        scaffold.write_main_source_file(self.project_root, project_name, template)

    async def detect_platform(self) -> Host:
        host = detect_host(strict=self.config.strict_platform_detection)
        logger.info(f"Detected host {host.platform.value}/{host.architecture.value}")
        return host

    async def download_and_extract_sdk(self, host: Host) -> None:
        await self.installer.install(host, self.project_root, SDK_DIR_NAME, sdk=True)

    async def setup_platform_bundles(self, project_name: str) -> None:
        await bundler.setup_platform_bundles(
            self.project_root, project_name, self.installer, self.config
        )
