"""Predicate algebra behind step eligibility.

Every predicate is a plain function ``RunnerState -> bool``. Predicates close
over the (immutable) model only, never over runner internals, so each clause
can be evaluated on a hand-built state in isolation.

A step is eligible when all of these hold:

- its flow position is reached,
- its flow's ``when`` condition holds (first step of the flow only),
- one of its actors is among the runner's acting actors,
- no interrupting step that could take the same event is eligible
  (only for steps that do not interrupt themselves).

A step pinned by "continue without alternative" counts as reached and is
not interrupted, until the next step runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reqflow.model.elements import After, AtStart, Condition, Flow, InsteadOf, Step
from reqflow.runner.state import RunnerState

if TYPE_CHECKING:
    from reqflow.model.model import Model


def always(_state: RunnerState) -> bool:
    return True


def all_of(*conditions: Condition) -> Condition:
    if len(conditions) == 1:
        return conditions[0]

    def _all_of(state: RunnerState) -> bool:
        return all(condition(state) for condition in conditions)

    return _all_of


def any_of(*conditions: Condition) -> Condition:
    def _any_of(state: RunnerState) -> bool:
        return any(condition(state) for condition in conditions)

    return _any_of


def negate(condition: Condition) -> Condition:
    def _negate(state: RunnerState) -> bool:
        return not condition(state)

    return _negate


def at_start(state: RunnerState) -> bool:
    return state.at_start


def after(model: Model, step: Step) -> Condition:
    """True right after ``step``.

    If ``step`` included another use case, it only counts as "just run" once
    a flow of the included use case has reached its last step.
    """

    def _after(state: RunnerState) -> bool:
        frame = state.active_include
        if frame is not None and frame.including_step is step:
            return model.ends_flow_of(frame.use_case, state.latest_step)
        return state.latest_step is step

    return _after


def included_from(use_case: str) -> Condition:
    """True right after a step included ``use_case``."""

    def _included_from(state: RunnerState) -> bool:
        frame = state.active_include
        return (
            frame is not None
            and frame.use_case == use_case
            and state.latest_step is frame.including_step
        )

    return _included_from


def in_different_flow(flow: Flow) -> Condition:
    def _in_different_flow(state: RunnerState) -> bool:
        return state.latest_flow is not flow

    return _in_different_flow


def pinned(step: Step) -> Condition:
    def _pinned(state: RunnerState) -> bool:
        return state.pinned_step is step

    return _pinned


def has_actor(step: Step) -> Condition:
    def _has_actor(state: RunnerState) -> bool:
        return not step.actors.isdisjoint(state.actors)

    return _has_actor


def flow_position(model: Model, flow: Flow) -> Condition:
    """Reachability of the first step of ``flow``."""

    position = flow.position
    if isinstance(position, After):
        return after(model, model.get_step(flow.use_case, position.step))
    if isinstance(position, InsteadOf):
        return reachability(model, model.get_step(flow.use_case, position.step))
    if isinstance(position, AtStart):
        return at_start
    if position is None and flow.basic:
        if model.is_included(flow.use_case):
            return included_from(flow.use_case)
        return at_start
    return always


def reachability(model: Model, step: Step) -> Condition:
    """Whether the runner is at the point in its flow where ``step`` comes next."""

    if step.previous is not None:
        return after(model, model.get_step(step.use_case, step.previous))

    flow = model.flow_of(step)
    position = flow_position(model, flow)
    if flow.interrupting:
        return all_of(in_different_flow(flow), position)
    return position


def not_interrupted(model: Model, step: Step) -> Condition:
    """False while an interrupting step that takes the same event is eligible."""

    def _not_interrupted(state: RunnerState) -> bool:
        if state.pinned_step is step:
            return True
        for other in model.interrupting_steps:
            if other is step or not other.accepts(step.event_type):
                continue
            if model.predicate(other)(state):
                return False
        return True

    return _not_interrupted


def eligibility(model: Model, step: Step) -> Condition:
    flow = model.flow_of(step)
    clauses: list[Condition] = [any_of(pinned(step), reachability(model, step))]
    if step.index == 0 and flow.when is not None:
        clauses.append(flow.when)
    clauses.append(has_actor(step))
    if not model.is_interrupting(step):
        clauses.append(not_interrupted(model, step))
    return all_of(*clauses)
