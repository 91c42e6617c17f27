"""Core data model for project generation.

A ``Plan`` is an immutable tuple of ``Step`` values.  Each step pairs a unique
name with a typed ``StepAction`` (the work to perform) and a ``StepStatus``.
Only the status ever changes, and only through ``advance``.
"""

from enum import Enum
from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Step status
# ============================================================================


class StatusBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def is_terminal(self) -> bool:
        return False


class Pending(StatusBase):
    state: Literal["pending"] = "pending"


class InProgress(StatusBase):
    state: Literal["in_progress"] = "in_progress"


class Complete(StatusBase):
    state: Literal["complete"] = "complete"

    @property
    def is_terminal(self) -> bool:
        return True


class Failed(StatusBase):
    state: Literal["failed"] = "failed"
    reason: str = ""

    @property
    def is_terminal(self) -> bool:
        return True


StepStatus = Annotated[
    Union[Pending, InProgress, Complete, Failed], Field(discriminator="state")
]

# Terminal result of a whole generation run.
Outcome = Union[Complete, Failed]


# ============================================================================
# Choices and host description
# ============================================================================


class Template(str, Enum):
    TWO_D = "2d"
    THREE_D = "3d"
    PHYSICS = "physics"


class Platform(str, Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


class Architecture(str, Enum):
    X64 = "x64"
    ARM64 = "arm64"
    AARCH64 = "aarch64"


class Host(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: Platform
    architecture: Architecture


class WizardChoices(BaseModel):
    """Answers collected by the choice screens.

    Frozen: screens produce an updated copy with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    include_ui_overlay: bool = False
    template: Template | None = None
    bundle_for_desktop: bool = False


# ============================================================================
# Step actions - one variant per kind of work, carrying its own payload
# ============================================================================


class ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: ClassVar[str] = ""


class UpdateManifest(ActionBase):
    kind: Literal["UpdateManifest"] = "UpdateManifest"
    title: ClassVar[str] = "Update gleam.toml"

    project_name: str
    include_ui_overlay: bool = False


class InstallDevTooling(ActionBase):
    kind: Literal["InstallDevTooling"] = "InstallDevTooling"
    title: ClassVar[str] = "Install Gleam dependencies"


class InstallRuntimePackages(ActionBase):
    kind: Literal["InstallRuntimePackages"] = "InstallRuntimePackages"
    title: ClassVar[str] = "Install npm packages"


class WriteIgnoreFile(ActionBase):
    kind: Literal["WriteIgnoreFile"] = "WriteIgnoreFile"
    title: ClassVar[str] = "Write .gitignore"


class WriteMainSourceFile(ActionBase):
    kind: Literal["WriteMainSourceFile"] = "WriteMainSourceFile"
    title: ClassVar[str] = "Write main source file"

    project_name: str
    template: Template


class DetectPlatform(ActionBase):
    kind: Literal["DetectPlatform"] = "DetectPlatform"
    title: ClassVar[str] = "Detect host platform"


class DownloadSdk(ActionBase):
    kind: Literal["DownloadSdk"] = "DownloadSdk"
    title: ClassVar[str] = "Download NW.js SDK"


class SetupPlatformBundles(ActionBase):
    kind: Literal["SetupPlatformBundles"] = "SetupPlatformBundles"
    title: ClassVar[str] = "Set up desktop bundles"

    project_name: str


StepAction = Annotated[
    Union[
        UpdateManifest,
        InstallDevTooling,
        InstallRuntimePackages,
        WriteIgnoreFile,
        WriteMainSourceFile,
        DetectPlatform,
        DownloadSdk,
        SetupPlatformBundles,
    ],
    Field(discriminator="kind"),
]


# ============================================================================
# Steps and plans
# ============================================================================


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    action: StepAction
    status: StepStatus = Field(default_factory=Pending)

    @property
    def title(self) -> str:
        return self.action.title


Plan = tuple[Step, ...]


def advance(plan: Plan, name: str, new_status: StatusBase) -> Plan:
    """Return ``plan`` with the status of step ``name`` replaced.

    Only the first step with a matching name is considered.  Steps that are
    already ``Complete`` or ``Failed`` keep their status, and an unknown name
    leaves the plan untouched.
    """
    for index, step in enumerate(plan):
        if step.name != name:
            continue
        if step.status.is_terminal:
            return plan
        updated = step.model_copy(update={"status": new_status})
        return plan[:index] + (updated,) + plan[index + 1 :]
    return plan


def first_pending(plan: Plan, start: int = 0) -> int | None:
    """Index of the first ``Pending`` step at or after ``start``.

    Returns None when nothing is left to run.
    """
    for index in range(start, len(plan)):
        if isinstance(plan[index].status, Pending):
            return index
    return None


# ============================================================================
# Gateway results and shared generation context
# ============================================================================


class Failure(BaseModel):
    """Human-readable reason a gateway operation did not complete."""

    reason: str = ""


class GenerationContext(BaseModel):
    """Values produced by one step and read by a later one in the same run."""

    host: Host | None = None
