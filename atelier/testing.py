"""Test helpers for code that drives generation.

``ScriptedGateway`` performs no I/O.  It records every operation in call order
and fails the step kinds it is told to fail::

    gateway = ScriptedGateway(failures={"DownloadSdk": "network unreachable"})
    done = await Sequencer(gateway).run(build_plan(choices))
    assert gateway.calls == ["UpdateManifest", ..., "DownloadSdk"]
"""

from __future__ import annotations

from atelier.errors import AtelierError
from atelier.gateway import Gateway
from atelier.model import Architecture, Host, Platform, Template


class ScriptedFailure(AtelierError):
    pass


class ScriptedGateway(Gateway):
    def __init__(
        self,
        failures: dict[str, str] | None = None,
        host: Host | None = None,
    ) -> None:
        super().__init__()
        self.failures = dict(failures or {})
        self.host = host or Host(platform=Platform.LINUX, architecture=Architecture.X64)
        self.calls: list[str] = []
        self.sdk_hosts: list[Host] = []
        self.templates: list[Template] = []

    def _record(self, kind: str) -> None:
        self.calls.append(kind)
        if kind in self.failures:
            raise ScriptedFailure(self.failures[kind])

    async def update_manifest(self, project_name: str, include_ui_overlay: bool) -> None:
        self._record("UpdateManifest")

    async def install_dev_tooling(self) -> None:
        self._record("InstallDevTooling")

    async def install_runtime_packages(self) -> None:
        self._record("InstallRuntimePackages")

    async def write_ignore_file(self) -> None:
        self._record("WriteIgnoreFile")

    async def write_main_source_file(self, project_name: str, template: Template) -> None:
        self.templates.append(template)
        self._record("WriteMainSourceFile")

    async def detect_platform(self) -> Host:
        self._record("DetectPlatform")
        return self.host

    async def download_and_extract_sdk(self, host: Host) -> None:
        self.sdk_hosts.append(host)
        self._record("DownloadSdk")

    async def setup_platform_bundles(self, project_name: str) -> None:
        self._record("SetupPlatformBundles")
