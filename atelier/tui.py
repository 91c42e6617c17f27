"""Terminal front end: turns keypresses into messages and redraws the wizard."""

import asyncio
import logging
from collections.abc import Callable

import click

from atelier.controller import (
    GenerationFinished,
    Key,
    KeyPressed,
    ProgressUpdated,
    Quit,
    StartGeneration,
    WizardController,
)
from atelier.model import Outcome, Plan
from atelier.sequencer import PlanObserver, Sequencer

logger = logging.getLogger(__name__)

SequencerFactory = Callable[[PlanObserver], Sequencer]

_KEYMAP = {
    "\x1b[A": Key.UP,
    "\x1bOA": Key.UP,
    "\xe0H": Key.UP,
    "k": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1bOB": Key.DOWN,
    "\xe0P": Key.DOWN,
    "j": Key.DOWN,
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    " ": Key.ENTER,
    "q": Key.QUIT,
    "Q": Key.QUIT,
    "\x03": Key.QUIT,
    "\x1b": Key.QUIT,
}


def decode_key(raw: str) -> Key:
    return _KEYMAP.get(raw, Key.OTHER)


class TerminalApp:
    """Draw, read a key, update; repeat until the controller asks to quit.

    Keys are not read while a plan is running.  Ctrl-C is the way out during
    generation: the ``KeyboardInterrupt`` propagates to the caller.
    """

    def __init__(
        self,
        controller: WizardController,
        sequencer_factory: SequencerFactory,
        read_key: Callable[[], str] = click.getchar,
        clear: Callable[[], None] = click.clear,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self.controller = controller
        self._sequencer_factory = sequencer_factory
        self._read_key = read_key
        self._clear = clear
        self._echo = echo
        self.outcome: Outcome | None = None

    def draw(self) -> None:
        self._clear()
        self._echo(self.controller.render())

    def _on_progress(self, plan: Plan) -> None:
        self.controller.update(ProgressUpdated(plan=plan))
        self.draw()

    def _generate(self, plan: Plan) -> None:
        sequencer = self._sequencer_factory(self._on_progress)
        done = asyncio.run(sequencer.run(plan))
        self.outcome = done.outcome
        self.controller.update(GenerationFinished(outcome=done.outcome))

    def run(self) -> Outcome | None:
        """Run until the user quits.  Returns the generation outcome, if any."""
        while True:
            self.draw()
            effect = self.controller.update(KeyPressed(key=decode_key(self._read_key())))
            if isinstance(effect, Quit):
                return self.outcome
            if isinstance(effect, StartGeneration):
                self._generate(effect.plan)
