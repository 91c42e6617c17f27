"""Turns frozen wizard choices into the ordered list of generation steps."""

from atelier.model import (
    DetectPlatform,
    DownloadSdk,
    InstallDevTooling,
    InstallRuntimePackages,
    Plan,
    SetupPlatformBundles,
    Step,
    UpdateManifest,
    WizardChoices,
    WriteIgnoreFile,
    WriteMainSourceFile,
)


def build_plan(choices: WizardChoices) -> Plan:
    """Build the plan for ``choices``.

    Always: UpdateManifest, InstallDevTooling, InstallRuntimePackages,
    WriteIgnoreFile.  Then WriteMainSourceFile when a template was picked,
    then DetectPlatform, DownloadSdk and SetupPlatformBundles when bundling
    for desktop.  Every step starts ``Pending``.
    """
    actions = [
        UpdateManifest(
            project_name=choices.project_name,
            include_ui_overlay=choices.include_ui_overlay,
        ),
        InstallDevTooling(),
        InstallRuntimePackages(),
        WriteIgnoreFile(),
    ]
    if choices.template is not None:
        actions.append(
            WriteMainSourceFile(
                project_name=choices.project_name, template=choices.template
            )
        )
    if choices.bundle_for_desktop:
        actions.extend(
            [
                DetectPlatform(),
                DownloadSdk(),
                SetupPlatformBundles(project_name=choices.project_name),
            ]
        )
    return tuple(Step(name=action.kind, action=action) for action in actions)


def step_names(plan: Plan) -> list[str]:
    return [step.name for step in plan]
