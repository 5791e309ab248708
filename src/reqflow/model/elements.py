"""Immutable building blocks of a model.

Elements reference each other by name (use case, flow, previous step) so they
can stay frozen; :class:`reqflow.model.model.Model` resolves the names.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from reqflow.model.continuations import Continuation
    from reqflow.runner.state import RunnerState

Condition = Callable[["RunnerState"], bool]
Reaction = Callable[..., object]

BASIC_FLOW = "Basic flow"
USER = "User"
SYSTEM = "System"


@dataclass(frozen=True, slots=True)
class Actor:
    """A named user group allowed to trigger some steps."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class AtStart:
    """The flow starts when no step has run yet."""


@dataclass(frozen=True, slots=True)
class After:
    step: str


@dataclass(frozen=True, slots=True)
class InsteadOf:
    step: str


@dataclass(frozen=True, slots=True)
class Anytime:
    pass


FlowPosition = Union[AtStart, After, InsteadOf, Anytime]


@dataclass(frozen=True, slots=True, eq=False)
class Step:
    """The smallest unit of behavior.

    ``event_type`` is the class of events the step reacts to, including
    subclasses. ``None`` makes the step autonomous: the runner triggers it
    on its own as soon as its predicate holds.
    """

    name: str
    use_case: str
    flow: str
    index: int
    previous: str | None
    event_type: type | None
    actors: frozenset[Actor]
    reaction: Reaction | None = None
    continuation: Continuation | None = None
    raises: Callable[[], object] | None = None

    @property
    def is_autonomous(self) -> bool:
        return self.event_type is None

    def accepts(self, event_type: type | None) -> bool:
        """Whether an event of ``event_type`` can trigger this step.

        ``None`` stands for the runner's own completion signal, which only
        autonomous steps accept.
        """

        if event_type is None or self.event_type is None:
            return event_type is None and self.event_type is None
        return issubclass(event_type, self.event_type)

    def __repr__(self) -> str:
        return f"Step({self.use_case!r}, {self.name!r})"


@dataclass(frozen=True, slots=True, eq=False)
class Flow:
    name: str
    use_case: str
    steps: tuple[Step, ...]
    position: FlowPosition | None = None
    when: Condition | None = None
    basic: bool = False
    flowless: bool = False

    @property
    def interrupting(self) -> bool:
        """Whether the flow's first step pre-empts the flow it branches off."""

        if self.basic or self.flowless:
            return False
        return self.position is not None or self.when is not None

    @property
    def first_step(self) -> Step | None:
        return self.steps[0] if self.steps else None

    @property
    def last_step(self) -> Step | None:
        return self.steps[-1] if self.steps else None

    def __repr__(self) -> str:
        return f"Flow({self.use_case!r}, {self.name!r})"


@dataclass(frozen=True, slots=True, eq=False)
class UseCase:
    name: str
    flows: tuple[Flow, ...]

    @property
    def basic_flow(self) -> Flow:
        return self.flows[0]

    @property
    def steps(self) -> tuple[Step, ...]:
        return tuple(step for flow in self.flows for step in flow.steps)

    def find_flow(self, name: str) -> Flow | None:
        for flow in self.flows:
            if flow.name == name:
                return flow
        return None

    def find_step(self, name: str) -> Step | None:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def __repr__(self) -> str:
        return f"UseCase({self.name!r})"
