"""The per-session engine that makes a model react to events.

A runner is bound to one model. Each call to :meth:`ModelRunner.dispatch`
resolves at most one step per event, executes it, and then keeps triggering
autonomous steps until none is eligible any more.

A runner is single-writer: use one runner per session, or serialize calls.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from reqflow.config import ReqflowSettings
from reqflow.errors import AmbiguousStepsError, RunnerNotBoundError
from reqflow.model.elements import Actor, Flow, Step, UseCase
from reqflow.runner.policy import choose_step
from reqflow.runner.state import IncludeFrame, RunnerState

if TYPE_CHECKING:
    from reqflow.model.model import Model

logger = logging.getLogger(__name__)


class ModelRunner:
    def __init__(self, settings: ReqflowSettings | None = None) -> None:
        self._settings = settings or ReqflowSettings()
        self._model: Model | None = None
        self._chosen_actors: tuple[Actor, ...] = ()
        self._state = RunnerState()

        self._recording = False
        self._recorded_step_names: list[str] = []
        self._recorded_events: list[object] = []
        if self._settings.record_by_default:
            self.start_recording()

    @property
    def model(self) -> Model:
        if self._model is None:
            raise RunnerNotBoundError("Runner is not bound to a model; call bind() first")
        return self._model

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def latest_step(self) -> Step | None:
        return self._state.latest_step

    @property
    def latest_flow(self) -> Flow | None:
        return self._state.latest_flow

    @property
    def is_recording(self) -> bool:
        return self._recording

    # Runtime surface

    def bind(self, model: Model) -> ModelRunner:
        """Attach to ``model``, start from scratch and run autonomous steps."""

        self._model = model
        self._state = RunnerState(actors=self._acting_actors())
        logger.info(
            "Runner bound to model",
            extra={"use_cases": [uc.name for uc in model.use_cases]},
        )
        self._run_autonomous_steps()
        return self

    def act_as(self, *actors: Actor) -> ModelRunner:
        """Only steps of ``actors`` (and of the system) react from now on.

        Without a call to this method the runner acts as the model's user.
        """

        self._chosen_actors = tuple(actors)
        self._state = replace(self._state, actors=self._acting_actors())
        return self

    def dispatch(self, *events: object) -> ModelRunner:
        """React to ``events`` in order.

        Each event is fully handled, including the autonomous steps it
        enables, before the next one is looked at. Events no step can react
        to are dropped.
        """

        if self._model is None:
            raise RunnerNotBoundError("Runner is not bound to a model; call bind() first")
        for event in events:
            self._react_to(event)
        return self

    def reset(self) -> None:
        """Forget which step ran last, as if nothing had run yet."""

        self._state = self._state.cleared()

    def start_recording(self) -> ModelRunner:
        self._recording = True
        self._recorded_step_names = []
        self._recorded_events = []
        return self

    def stop_recording(self) -> ModelRunner:
        self._recording = False
        return self

    def recorded_step_names(self) -> tuple[str, ...]:
        return tuple(self._recorded_step_names)

    def recorded_events(self) -> tuple[object, ...]:
        """Events in step execution order; autonomous steps record ``None``."""

        return tuple(self._recorded_events)

    def can_react_to(self, event_type: type) -> bool:
        return bool(self.steps_that_can_react_to(event_type))

    def steps_that_can_react_to(self, event_type: type | None) -> list[Step]:
        """Eligible steps for ``event_type``; ``None`` means autonomous steps."""

        model = self.model
        state = self._state
        return [
            step
            for step in model.steps
            if step.accepts(event_type) and model.predicate(step)(state)
        ]

    # Used by continuations

    def move_after(self, step: Step | None) -> None:
        flow = self.model.flow_of(step) if step is not None else None
        self._state = self._state.moved_to(step, flow)

    def pin(self, step: Step) -> None:
        """Make ``step`` reachable and preferred until the next step runs."""

        self._state = replace(self._state, pinned_step=step)

    def include(self, use_case: UseCase, including_step: Step) -> None:
        frame = IncludeFrame(use_case=use_case.name, including_step=including_step)
        self._state = replace(self._state, includes=(*self._state.includes, frame))

    # Internals

    def _acting_actors(self) -> frozenset[Actor]:
        if self._model is None:
            return frozenset(self._chosen_actors)
        chosen = self._chosen_actors or (self._model.user_actor,)
        return frozenset((*chosen, self._model.system_actor))

    def _choose(self, event_type: type | None) -> Step | None:
        return choose_step(
            self.steps_that_can_react_to(event_type),
            state=self._state,
            is_interrupting=self.model.is_interrupting,
            policy=self._settings.ambiguity_policy,
        )

    def _react_to(self, event: object) -> None:
        step = self._choose(type(event))
        if step is None:
            logger.debug(
                "No step can react to event; dropped",
                extra={"event_type": type(event).__name__},
            )
            return
        self._trigger(step, event)
        self._run_autonomous_steps()

    def _run_autonomous_steps(self) -> None:
        while True:
            step = self._choose(None)
            if step is None:
                return
            self._trigger(step, None)

    def _trigger(self, step: Step, event: object | None) -> None:
        before = self._state
        recorded = len(self._recorded_step_names)

        self._enter(step)
        if self._recording:
            self._recorded_step_names.append(step.name)
            self._recorded_events.append(event)
        logger.debug(
            "Step triggered",
            extra={"use_case": step.use_case, "flow": step.flow, "step": step.name},
        )

        try:
            if step.reaction is not None:
                if step.is_autonomous:
                    step.reaction()
                else:
                    step.reaction(event)
        except Exception as exc:
            try:
                handler = self._choose(type(exc))
            except AmbiguousStepsError as ambiguous:
                self._restore(before, recorded)
                raise ambiguous from exc
            if handler is None:
                logger.warning(
                    "Reaction failed and no step handles the failure",
                    extra={"step": step.name, "error": type(exc).__name__},
                )
                self._restore(before, recorded)
                raise
            logger.debug(
                "Reaction failed; handing failure to a handling step",
                extra={"step": step.name, "error": type(exc).__name__},
            )
            try:
                self._react_to(exc)
            except BaseException:
                self._restore(before, recorded)
                raise
            return

        if step.continuation is not None:
            step.continuation.apply(self, step)
        if step.raises is not None:
            self._react_to(step.raises())

    def _restore(self, state: RunnerState, recorded: int) -> None:
        """Go back to ``state`` and forget steps recorded after ``recorded``."""

        self._state = state
        del self._recorded_step_names[recorded:]
        del self._recorded_events[recorded:]

    def _enter(self, step: Step) -> None:
        includes = self._state.includes
        if includes and step.use_case != includes[-1].use_case:
            includes = includes[:-1]
        self._state = RunnerState(
            actors=self._state.actors,
            latest_step=step,
            latest_flow=self.model.flow_of(step),
            includes=includes,
        )
