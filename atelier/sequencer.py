"""Executes a plan one step at a time.

States::

    Idle --run(plan)--> Running(plan, index) --...--> Done(plan, outcome)

Each step is marked ``InProgress``, handed to the gateway, then marked
``Complete`` or ``Failed``.  The first failure ends the run: later steps stay
``Pending`` and the reason becomes the run's outcome.  Every status change is
pushed to the observer as a fresh plan snapshot.
"""

import logging
from collections.abc import Callable
from typing import Any, Literal, Union

from pydantic import BaseModel

from atelier.gateway import Gateway
from atelier.model import (
    Complete,
    Failed,
    Failure,
    GenerationContext,
    InProgress,
    Outcome,
    Plan,
    advance,
    first_pending,
)
from atelier.tracing import _NoopTracer

logger = logging.getLogger(__name__)

PlanObserver = Callable[[Plan], None]


class Idle(BaseModel):
    state: Literal["idle"] = "idle"


class Running(BaseModel):
    state: Literal["running"] = "running"
    plan: Plan
    index: int


class Done(BaseModel):
    state: Literal["done"] = "done"
    plan: Plan
    outcome: Outcome


SequencerState = Union[Idle, Running, Done]


class Sequencer:
    def __init__(
        self,
        gateway: Gateway,
        observer: PlanObserver | None = None,
        tracer: Any = None,
    ) -> None:
        self._gateway = gateway
        self._observer = observer
        self._tracer = tracer or _NoopTracer()
        self.state: SequencerState = Idle()

    def _publish(self, plan: Plan) -> None:
        if self._observer is not None:
            self._observer(plan)

    def _finish(self, plan: Plan, outcome: Outcome) -> Done:
        self.state = Done(plan=plan, outcome=outcome)
        return self.state

    async def run(self, plan: Plan) -> Done:
        """Drive ``plan`` to a terminal state and return it.

        An empty plan completes immediately.
        """
        if not isinstance(self.state, Idle):
            raise RuntimeError(f"Sequencer already {self.state.state}")

        context = GenerationContext()
        self._publish(plan)
        index = first_pending(plan)
        while index is not None:
            step = plan[index]
            plan = advance(plan, step.name, InProgress())
            self.state = Running(plan=plan, index=index)
            self._publish(plan)
            logger.info(f"Step {index + 1}/{len(plan)}: {step.name}")

            with self._tracer.span(
                "atelier.step",
                attributes={
                    "atelier.step": step.name,
                    "atelier.kind": step.action.kind,
                    "atelier.index": index,
                },
            ) as span:
                result = await self._gateway.perform(step.action, context)
                if isinstance(result, Failure):
                    self._tracer.mark_failed(span, result.reason)

            if isinstance(result, Failure):
                logger.warning(f"Step {step.name} failed: {result.reason}")
                plan = advance(plan, step.name, Failed(reason=result.reason))
                self._publish(plan)
                return self._finish(plan, Failed(reason=result.reason))

            plan = advance(plan, step.name, Complete())
            self.state = Running(plan=plan, index=index)
            self._publish(plan)
            index = first_pending(plan, index + 1)

        logger.info("All steps complete")
        return self._finish(plan, Complete())
