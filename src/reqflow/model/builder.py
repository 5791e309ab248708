"""Fluent construction of a :class:`~reqflow.model.model.Model`.

One builder type with chained calls. The builder keeps a cursor on the use
case, flow and step being declared; every call refines what the cursor points
at. Nothing is linked or validated until :meth:`ModelBuilder.build`.

Example::

    model = (
        ModelBuilder()
        .use_case("Get greeted")
        .basic_flow()
        .step("S1").system(prompt_user_to_enter_name)
        .step("S2").user(EntersName).system(greet_user)
        .build()
    )
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from reqflow.errors import (
    AmbiguousStepsError,
    ElementAlreadyInModelError,
    IncompleteStepError,
    NoSuchElementInModelError,
)
from reqflow.model.continuations import (
    Continuation,
    ContinuesAfter,
    ContinuesAt,
    ContinuesWithoutAlternativeAt,
    IncludesUseCase,
    Restarts,
)
from reqflow.model.elements import (
    BASIC_FLOW,
    SYSTEM,
    USER,
    Actor,
    After,
    Anytime,
    AtStart,
    Condition,
    Flow,
    FlowPosition,
    InsteadOf,
    Reaction,
    Step,
    UseCase,
)
from reqflow.model.model import Model

logger = logging.getLogger(__name__)

REPEAT_SUFFIX = "_REPEAT"


@dataclass(slots=True)
class _StepDraft:
    name: str
    event_type: type | None = None
    actors: tuple[Actor, ...] = ()
    reaction: Reaction | None = None
    continuation: Continuation | None = None
    raises: Callable[[], object] | None = None
    # Repeat steps take event, actors and reaction from this step at build time.
    repeats: _StepDraft | None = None


@dataclass(slots=True)
class _FlowDraft:
    name: str
    basic: bool = False
    flowless: bool = False
    position: FlowPosition | None = None
    when: Condition | None = None
    steps: list[_StepDraft] = field(default_factory=list)


@dataclass(slots=True)
class _UseCaseDraft:
    name: str
    flows: list[_FlowDraft] = field(default_factory=list)

    def find_flow(self, name: str) -> _FlowDraft | None:
        for flow in self.flows:
            if flow.name == name:
                return flow
        return None


class ModelBuilder:
    def __init__(self) -> None:
        self._user_actor = Actor(USER)
        self._system_actor = Actor(SYSTEM)
        self._actors: dict[str, Actor] = {
            USER: self._user_actor,
            SYSTEM: self._system_actor,
        }
        self._use_cases: list[_UseCaseDraft] = []

        self._use_case: _UseCaseDraft | None = None
        self._flow: _FlowDraft | None = None
        self._step: _StepDraft | None = None

    @property
    def user_actor(self) -> Actor:
        return self._user_actor

    @property
    def system_actor(self) -> Actor:
        return self._system_actor

    def actor(self, name: str) -> Actor:
        """Declare a new actor. Returns the actor, not the builder."""

        if name in self._actors:
            raise ElementAlreadyInModelError("actor", name)
        actor = Actor(name)
        self._actors[name] = actor
        return actor

    # Use cases and flows

    def use_case(self, name: str) -> ModelBuilder:
        if any(uc.name == name for uc in self._use_cases):
            raise ElementAlreadyInModelError("use case", name)
        use_case = _UseCaseDraft(name=name, flows=[_FlowDraft(name=BASIC_FLOW, basic=True)])
        self._use_cases.append(use_case)
        self._use_case, self._flow, self._step = use_case, None, None
        return self

    def basic_flow(self) -> ModelBuilder:
        use_case = self._require_use_case()
        self._flow, self._step = use_case.flows[0], None
        return self

    def flow(self, name: str) -> ModelBuilder:
        use_case = self._require_use_case()
        if use_case.find_flow(name) is not None:
            raise ElementAlreadyInModelError("flow", f"{use_case.name}/{name}")
        flow = _FlowDraft(name=name)
        use_case.flows.append(flow)
        self._flow, self._step = flow, None
        return self

    def at_start(self) -> ModelBuilder:
        return self._position(AtStart())

    def after(self, step_name: str) -> ModelBuilder:
        return self._position(After(step_name))

    def instead_of(self, step_name: str) -> ModelBuilder:
        return self._position(InsteadOf(step_name))

    def anytime(self) -> ModelBuilder:
        return self._position(Anytime())

    def when(self, condition: Condition) -> ModelBuilder:
        """Guard the current flow's first step with ``condition``."""

        flow = self._require_flow()
        if flow.basic:
            raise IncompleteStepError("The basic flow cannot have a 'when' condition")
        if flow.steps and not flow.flowless:
            raise IncompleteStepError(
                f"'when' must be declared before the first step of flow {flow.name!r}"
            )
        flow.when = condition
        return self

    # Steps

    def step(self, name: str) -> ModelBuilder:
        if self._flow is None:
            self.basic_flow()
        flow = self._require_flow()
        if flow.flowless:
            raise IncompleteStepError(f"Flowless step {flow.name!r} cannot have further steps")
        step = _StepDraft(name=name)
        flow.steps.append(step)
        self._step = step
        return self

    def flowless_step(self, name: str) -> ModelBuilder:
        """Declare a step that is not part of any sequence.

        The step may react whenever its event arrives, optionally guarded by
        a following :meth:`when`.
        """

        use_case = self._require_use_case()
        if use_case.find_flow(name) is not None:
            raise ElementAlreadyInModelError("flow", f"{use_case.name}/{name}")
        step = _StepDraft(name=name)
        flow = _FlowDraft(name=name, flowless=True, steps=[step])
        use_case.flows.append(flow)
        self._flow, self._step = flow, step
        return self

    def actors(self, *actors: Actor) -> ModelBuilder:
        step = self._require_step()
        if not actors:
            raise IncompleteStepError(f"Step {step.name!r} needs at least one actor")
        for actor in actors:
            if self._actors.get(actor.name) != actor:
                raise NoSuchElementInModelError("actor", actor.name)
        step.actors = tuple(actors)
        return self

    def user(self, event_type: type) -> ModelBuilder:
        """React to events of ``event_type`` sent on behalf of a user."""

        return self._event(event_type, self._user_actor)

    def on(self, event_type: type) -> ModelBuilder:
        """React to system events or exceptions of ``event_type``."""

        return self._event(event_type, self._system_actor)

    def system(self, reaction: Reaction) -> ModelBuilder:
        """Set the step's reaction.

        Without a preceding :meth:`user` or :meth:`on` the step is autonomous
        and ``reaction`` is called without arguments.
        """

        step = self._require_step()
        self._default_actors(step)
        step.reaction = reaction
        return self

    def raises(self, supplier: Callable[[], object]) -> ModelBuilder:
        """After the reaction, dispatch the event returned by ``supplier``."""

        step = self._require_step()
        self._default_actors(step)
        step.raises = supplier
        return self

    def continues_after(self, step_name: str) -> ModelBuilder:
        return self._continuation(ContinuesAfter(step_name))

    def continues_at(self, step_name: str) -> ModelBuilder:
        return self._continuation(ContinuesAt(step_name))

    def continues_without_alternative_at(self, step_name: str) -> ModelBuilder:
        return self._continuation(ContinuesWithoutAlternativeAt(step_name))

    def includes_use_case(self, use_case_name: str) -> ModelBuilder:
        return self._continuation(IncludesUseCase(use_case_name))

    def restarts(self) -> ModelBuilder:
        return self._continuation(Restarts())

    def repeat_while(self, condition: Condition) -> ModelBuilder:
        """Keep accepting the current step's event while ``condition`` holds.

        Adds a flow ``<step>_REPEAT`` with one step of the same name, after
        the current step, that behaves like it and then continues after it.
        The condition is first checked after the step has run once. Calls
        chained after this one still apply to the repeat step.
        """

        use_case = self._require_use_case()
        step = self._require_step()
        name = f"{step.name}{REPEAT_SUFFIX}"
        if use_case.find_flow(name) is not None:
            raise ElementAlreadyInModelError("flow", f"{use_case.name}/{name}")
        repeat = _StepDraft(name=name, continuation=ContinuesAfter(step.name), repeats=step)
        use_case.flows.append(
            _FlowDraft(name=name, position=After(step.name), when=condition, steps=[repeat])
        )
        return self

    # Finalize

    def build(self) -> Model:
        use_cases = tuple(self._build_use_case(draft) for draft in self._use_cases)
        model = Model(
            use_cases=use_cases,
            actors=self._actors.values(),
            user_actor=self._user_actor,
            system_actor=self._system_actor,
        )
        _check_certain_ambiguities(model)
        logger.debug(
            "Model built",
            extra={
                "use_cases": len(use_cases),
                "steps": len(model.steps),
            },
        )
        return model

    def _build_use_case(self, draft: _UseCaseDraft) -> UseCase:
        step_names: set[str] = set()
        for flow in draft.flows:
            if not flow.steps and not flow.basic:
                raise IncompleteStepError(f"Flow {draft.name}/{flow.name} has no steps")
            for step in flow.steps:
                if step.name in step_names:
                    raise ElementAlreadyInModelError("step", f"{draft.name}/{step.name}")
                step_names.add(step.name)

        flows = tuple(self._build_flow(draft, flow, step_names) for flow in draft.flows)
        _check_instead_of_cycles(draft.name, flows)
        return UseCase(name=draft.name, flows=flows)

    def _build_flow(self, use_case: _UseCaseDraft, draft: _FlowDraft, names: set[str]) -> Flow:
        def require(step_name: str) -> None:
            if step_name not in names:
                raise NoSuchElementInModelError("step", f"{use_case.name}/{step_name}")

        if isinstance(draft.position, (After, InsteadOf)):
            require(draft.position.step)

        steps: list[Step] = []
        previous: str | None = None
        for index, step in enumerate(draft.steps):
            if isinstance(
                step.continuation, (ContinuesAfter, ContinuesAt, ContinuesWithoutAlternativeAt)
            ):
                require(step.continuation.target)
            elif isinstance(step.continuation, IncludesUseCase):
                self._require_includable(use_case.name, step.continuation.use_case)
            source = step.repeats or step
            steps.append(
                Step(
                    name=step.name,
                    use_case=use_case.name,
                    flow=draft.name,
                    index=index,
                    previous=previous,
                    event_type=source.event_type,
                    actors=frozenset(source.actors or (self._system_actor,)),
                    reaction=source.reaction,
                    continuation=step.continuation,
                    raises=step.raises,
                )
            )
            previous = step.name

        return Flow(
            name=draft.name,
            use_case=use_case.name,
            steps=tuple(steps),
            position=draft.position,
            when=draft.when,
            basic=draft.basic,
            flowless=draft.flowless,
        )

    def _require_includable(self, including: str, included: str) -> None:
        if included == including:
            raise IncompleteStepError(f"Use case {including!r} cannot include itself")
        if not any(uc.name == included for uc in self._use_cases):
            raise NoSuchElementInModelError("use case", included)

    # Cursor helpers

    def _require_use_case(self) -> _UseCaseDraft:
        if self._use_case is None:
            raise IncompleteStepError("Declare a use case first")
        return self._use_case

    def _require_flow(self) -> _FlowDraft:
        self._require_use_case()
        if self._flow is None:
            raise IncompleteStepError("Declare a flow first")
        return self._flow

    def _require_step(self) -> _StepDraft:
        self._require_flow()
        if self._step is None:
            raise IncompleteStepError("Declare a step first")
        return self._step

    def _position(self, position: FlowPosition) -> ModelBuilder:
        flow = self._require_flow()
        if flow.basic or flow.flowless:
            raise IncompleteStepError(f"Flow {flow.name!r} cannot be positioned")
        if flow.steps:
            raise IncompleteStepError(
                f"Position of flow {flow.name!r} must be declared before its first step"
            )
        if flow.position is not None:
            raise IncompleteStepError(f"Flow {flow.name!r} already has a position")
        flow.position = position
        return self

    def _event(self, event_type: type, default_actor: Actor) -> ModelBuilder:
        step = self._require_step()
        if not isinstance(event_type, type):
            raise IncompleteStepError(
                f"Step {step.name!r} needs an event class, got {event_type!r}"
            )
        step.event_type = event_type
        if not step.actors:
            step.actors = (default_actor,)
        return self

    def _continuation(self, continuation: Continuation) -> ModelBuilder:
        step = self._require_step()
        self._default_actors(step)
        step.continuation = continuation
        return self

    def _default_actors(self, step: _StepDraft) -> None:
        if not step.actors:
            step.actors = (self._system_actor,)


def _check_instead_of_cycles(use_case: str, flows: tuple[Flow, ...]) -> None:
    heads = {flow.first_step.name: flow for flow in flows if flow.first_step is not None}
    for flow in flows:
        seen: set[str] = set()
        current: Flow | None = flow
        while current is not None and isinstance(current.position, InsteadOf):
            target = current.position.step
            if target in seen:
                raise IncompleteStepError(
                    f"Flows of use case {use_case!r} replace each other in a cycle at {target!r}"
                )
            seen.add(target)
            current = heads.get(target)


def _check_certain_ambiguities(model: Model) -> None:
    """Reject step pairs that would always be eligible together."""

    candidates = [
        step
        for step in model.steps
        if step.index == 0
        and model.flow_of(step).when is None
        and (model.flow_of(step).interrupting or model.flow_of(step).flowless)
    ]
    for i, first in enumerate(candidates):
        for second in candidates[i + 1 :]:
            first_flow, second_flow = model.flow_of(first), model.flow_of(second)
            if first_flow.flowless != second_flow.flowless:
                continue
            if not first_flow.flowless and (
                first.use_case != second.use_case or first_flow.position != second_flow.position
            ):
                continue
            overlapping_events = first.accepts(second.event_type) or second.accepts(
                first.event_type
            )
            if overlapping_events and not first.actors.isdisjoint(second.actors):
                raise AmbiguousStepsError([first, second])
