"""Wizard state machine and its text rendering.

Screens run ``WELCOME -> UI_OVERLAY -> TEMPLATE -> DESKTOP_BUNDLE`` and then
``GENERATING -> COMPLETE | FAILED``.  Confirming the desktop bundle choice
freezes the answers, builds the plan and asks the caller (through a
``StartGeneration`` effect) to run it.  The controller never mutates a plan; it
only stores the latest snapshot it is sent, and keeps it for the final screen.
"""

from enum import Enum
from typing import Any, Union

import click
from pydantic import BaseModel

from atelier.model import (
    Complete,
    Failed,
    InProgress,
    Outcome,
    Pending,
    Plan,
    Step,
    Template,
    WizardChoices,
)
from atelier.planner import build_plan


class Screen(str, Enum):
    WELCOME = "welcome"
    UI_OVERLAY = "ui_overlay"
    TEMPLATE = "template"
    DESKTOP_BUNDLE = "desktop_bundle"
    GENERATING = "generating"
    COMPLETE = "complete"
    FAILED = "failed"


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    QUIT = "quit"
    OTHER = "other"


# ============================================================================
# Messages in, effects out
# ============================================================================


class KeyPressed(BaseModel):
    key: Key


class ProgressUpdated(BaseModel):
    plan: Plan


class GenerationFinished(BaseModel):
    outcome: Outcome


Msg = Union[KeyPressed, ProgressUpdated, GenerationFinished]


class StartGeneration(BaseModel):
    plan: Plan


class Quit(BaseModel):
    pass


Effect = Union[StartGeneration, Quit]


# ============================================================================
# Choice screens
# ============================================================================

_OPTIONS: dict[Screen, tuple[str, list[tuple[str, Any]]]] = {
    Screen.UI_OVERLAY: (
        "Add a Lustre UI overlay on top of the game canvas?",
        [("No", False), ("Yes, include Lustre", True)],
    ),
    Screen.TEMPLATE: (
        "Start from a template?",
        [
            ("No template", None),
            ("2D scene", Template.TWO_D),
            ("3D scene", Template.THREE_D),
            ("Physics playground", Template.PHYSICS),
        ],
    ),
    Screen.DESKTOP_BUNDLE: (
        "Bundle the game as a desktop app with NW.js?",
        [("No", False), ("Yes, set up Linux, macOS and Windows bundles", True)],
    ),
}

_NEXT_SCREEN = {
    Screen.WELCOME: Screen.UI_OVERLAY,
    Screen.UI_OVERLAY: Screen.TEMPLATE,
    Screen.TEMPLATE: Screen.DESKTOP_BUNDLE,
}

_CHOICE_FIELD = {
    Screen.UI_OVERLAY: "include_ui_overlay",
    Screen.TEMPLATE: "template",
    Screen.DESKTOP_BUNDLE: "bundle_for_desktop",
}


class WizardModel(BaseModel):
    screen: Screen = Screen.WELCOME
    choices: WizardChoices
    cursor: int = 0
    plan: Plan = ()
    outcome: Outcome | None = None


class WizardController:
    def __init__(self, project_name: str) -> None:
        self.model = WizardModel(choices=WizardChoices(project_name=project_name))

    def _set(self, **changes: Any) -> None:
        self.model = self.model.model_copy(update=changes)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, msg: Msg) -> Effect | None:
        if isinstance(msg, KeyPressed):
            return self._on_key(msg.key)
        if isinstance(msg, ProgressUpdated):
            if self.model.screen == Screen.GENERATING:
                self._set(plan=msg.plan)
            return None
        if isinstance(msg, GenerationFinished):
            if self.model.screen == Screen.GENERATING:
                screen = Screen.COMPLETE if isinstance(msg.outcome, Complete) else Screen.FAILED
                self._set(screen=screen, outcome=msg.outcome)
            return None
        return None

    def _on_key(self, key: Key) -> Effect | None:
        screen = self.model.screen
        if key == Key.QUIT:
            return Quit()
        if screen in (Screen.COMPLETE, Screen.FAILED):
            return Quit()
        if screen == Screen.GENERATING:
            return None
        if screen == Screen.WELCOME:
            if key == Key.ENTER:
                self._set(screen=_NEXT_SCREEN[screen], cursor=0)
            return None

        options = _OPTIONS[screen][1]
        if key == Key.UP:
            self._set(cursor=(self.model.cursor - 1) % len(options))
        elif key == Key.DOWN:
            self._set(cursor=(self.model.cursor + 1) % len(options))
        elif key == Key.ENTER:
            return self._confirm(screen, options[self.model.cursor][1])
        return None

    def _confirm(self, screen: Screen, value: Any) -> Effect | None:
        choices = self.model.choices.model_copy(update={_CHOICE_FIELD[screen]: value})
        if screen != Screen.DESKTOP_BUNDLE:
            self._set(choices=choices, screen=_NEXT_SCREEN[screen], cursor=0)
            return None
        plan = build_plan(choices)
        self._set(choices=choices, screen=Screen.GENERATING, cursor=0, plan=plan)
        return StartGeneration(plan=plan)

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------

    def render(self) -> str:
        model = self.model
        header = click.style("atelier", bold=True) + f"  {model.choices.project_name}"
        if model.screen == Screen.WELCOME:
            body = [
                "This wizard sets up your Gleam project as a game:",
                "it edits gleam.toml, installs dependencies and can",
                "prepare desktop bundles for Linux, macOS and Windows.",
                "",
                click.style("enter", bold=True) + " continue   "
                + click.style("q", bold=True) + " quit",
            ]
        elif model.screen in _OPTIONS:
            question, options = _OPTIONS[model.screen]
            body = [question, ""]
            for index, (label, _) in enumerate(options):
                if index == model.cursor:
                    body.append(click.style(f"> {label}", fg="cyan", bold=True))
                else:
                    body.append(f"  {label}")
            body += ["", "up/down select   enter confirm   q quit"]
        elif model.screen == Screen.GENERATING:
            body = ["Generating project...", ""] + render_plan(model.plan)
        elif model.screen == Screen.COMPLETE:
            body = [click.style("Your project is ready!", fg="green", bold=True), ""]
            body += self._next_steps()
            body += ["", "Press any key to exit."]
        else:
            reason = model.outcome.reason if isinstance(model.outcome, Failed) else ""
            body = render_plan(model.plan) + [
                "",
                click.style("Generation failed:", fg="red", bold=True),
                "",
                reason,
                "",
                "Fix the problem and run atelier again; finished steps are safe to repeat.",
                "Press any key to exit.",
            ]
        return "\n".join([header, ""] + body) + "\n"

    def _next_steps(self) -> list[str]:
        steps = ["Next steps:", "  gleam run -m lustre/dev start"]
        if self.model.choices.bundle_for_desktop:
            steps += [
                "  atelier bundle            # rebuild and refresh desktop bundles",
                "  ./nwjs-sdk/nw .           # run the game in the desktop runtime",
            ]
        return steps


_MARKERS = {
    Pending: ("[ ]", None),
    InProgress: ("[~]", "yellow"),
    Complete: ("[x]", "green"),
    Failed: ("[!]", "red"),
}


def render_step(step: Step) -> str:
    marker, colour = _MARKERS[type(step.status)]
    line = f"{marker} {step.title}"
    if isinstance(step.status, Failed):
        line += f": {step.status.reason}"
    return click.style(line, fg=colour) if colour else line


def render_plan(plan: Plan) -> list[str]:
    return [render_step(step) for step in plan]
