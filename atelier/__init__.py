"""
Atelier - Gleam game project wizard

An interactive terminal wizard that turns a freshly created Gleam project into
a game project: it edits the manifest, installs dependencies, writes starter
files and can prepare NW.js desktop bundles for Linux, macOS and Windows.
"""

__version__ = "0.1.0"

# Core data model
from atelier.model import (
    Architecture,
    Complete,
    DetectPlatform,
    DownloadSdk,
    Failed,
    Failure,
    GenerationContext,
    Host,
    InProgress,
    InstallDevTooling,
    InstallRuntimePackages,
    Pending,
    Plan,
    Platform,
    SetupPlatformBundles,
    Step,
    StepAction,
    StepStatus,
    Template,
    UpdateManifest,
    WizardChoices,
    WriteIgnoreFile,
    WriteMainSourceFile,
    advance,
    first_pending,
)

# Planning and execution
from atelier.planner import build_plan
from atelier.sequencer import Done, Idle, Running, Sequencer

# Side effects
from atelier.gateway import Gateway, LocalGateway
from atelier.process import ProcessResult, ProcessRunner
from atelier.sdk import Downloader, SdkInstaller, detect_host

# Errors
from atelier.errors import (
    ArchiveFailure,
    AtelierError,
    IOFailure,
    ParseFailure,
    ProcessFailure,
    UnknownStep,
    UnsupportedPlatform,
)

# Configuration
from atelier.config import AtelierConfig, load_atelier_toml, load_config

# Tracing
from atelier.tracing import AtelierTracer

# Front end
from atelier.controller import Screen, WizardController

# Testing helpers
from atelier.testing import ScriptedGateway

__all__ = [
    # Version
    "__version__",
    # Model
    "Architecture",
    "Complete",
    "DetectPlatform",
    "DownloadSdk",
    "Failed",
    "Failure",
    "GenerationContext",
    "Host",
    "InProgress",
    "InstallDevTooling",
    "InstallRuntimePackages",
    "Pending",
    "Plan",
    "Platform",
    "SetupPlatformBundles",
    "Step",
    "StepAction",
    "StepStatus",
    "Template",
    "UpdateManifest",
    "WizardChoices",
    "WriteIgnoreFile",
    "WriteMainSourceFile",
    "advance",
    "first_pending",
    # Planning and execution
    "build_plan",
    "Done",
    "Idle",
    "Running",
    "Sequencer",
    # Side effects
    "Gateway",
    "LocalGateway",
    "ProcessResult",
    "ProcessRunner",
    "Downloader",
    "SdkInstaller",
    "detect_host",
    # Errors
    "ArchiveFailure",
    "AtelierError",
    "IOFailure",
    "ParseFailure",
    "ProcessFailure",
    "UnknownStep",
    "UnsupportedPlatform",
    # Config
    "AtelierConfig",
    "load_atelier_toml",
    "load_config",
    # Tracing
    "AtelierTracer",
    # Front end
    "Screen",
    "WizardController",
    # Testing
    "ScriptedGateway",
]
