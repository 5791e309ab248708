"""The immutable, fully linked model of all use cases.

A model is produced once by :class:`reqflow.model.builder.ModelBuilder` and
never changes afterwards, so any number of runners may share it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from reqflow.errors import NoSuchElementInModelError
from reqflow.model import predicates
from reqflow.model.continuations import IncludesUseCase
from reqflow.model.elements import After, Actor, Condition, Flow, InsteadOf, Step, UseCase

if TYPE_CHECKING:
    from reqflow.model.builder import ModelBuilder


class Model:
    def __init__(
        self,
        *,
        use_cases: Iterable[UseCase],
        actors: Iterable[Actor],
        user_actor: Actor,
        system_actor: Actor,
    ) -> None:
        self._use_cases = tuple(use_cases)
        self._actors = {actor.name: actor for actor in actors}
        self._user_actor = user_actor
        self._system_actor = system_actor

        self._use_cases_by_name = {uc.name: uc for uc in self._use_cases}
        self._flows: dict[tuple[str, str], Flow] = {}
        self._steps: dict[tuple[str, str], Step] = {}
        for use_case in self._use_cases:
            for flow in use_case.flows:
                self._flows[(use_case.name, flow.name)] = flow
                for step in flow.steps:
                    self._steps[(use_case.name, step.name)] = step

        self._all_steps = tuple(self._steps.values())
        self._included = frozenset(
            step.continuation.use_case
            for step in self._all_steps
            if isinstance(step.continuation, IncludesUseCase)
        )
        self._interrupting_steps = tuple(
            step for step in self._all_steps if self.is_interrupting(step)
        )
        # Built last: predicates look things up through this model.
        self._predicates: dict[Step, Condition] = {
            step: predicates.eligibility(self, step) for step in self._all_steps
        }

    @staticmethod
    def builder() -> ModelBuilder:
        from reqflow.model.builder import ModelBuilder

        return ModelBuilder()

    @property
    def use_cases(self) -> tuple[UseCase, ...]:
        return self._use_cases

    @property
    def actors(self) -> tuple[Actor, ...]:
        return tuple(self._actors.values())

    @property
    def user_actor(self) -> Actor:
        return self._user_actor

    @property
    def system_actor(self) -> Actor:
        return self._system_actor

    @property
    def steps(self) -> tuple[Step, ...]:
        """All steps, in declaration order."""

        return self._all_steps

    @property
    def interrupting_steps(self) -> tuple[Step, ...]:
        return self._interrupting_steps

    def has_use_case(self, name: str) -> bool:
        return name in self._use_cases_by_name

    def find_use_case(self, name: str) -> UseCase | None:
        return self._use_cases_by_name.get(name)

    def get_use_case(self, name: str) -> UseCase:
        use_case = self.find_use_case(name)
        if use_case is None:
            raise NoSuchElementInModelError("use case", name)
        return use_case

    def find_actor(self, name: str) -> Actor | None:
        return self._actors.get(name)

    def find_step(self, use_case: str, name: str) -> Step | None:
        return self._steps.get((use_case, name))

    def get_step(self, use_case: str, name: str) -> Step:
        step = self.find_step(use_case, name)
        if step is None:
            raise NoSuchElementInModelError("step", f"{use_case}/{name}")
        return step

    def flow_of(self, step: Step) -> Flow:
        return self._flows[(step.use_case, step.flow)]

    def predicate(self, step: Step) -> Condition:
        return self._predicates[step]

    def is_included(self, use_case: str) -> bool:
        return use_case in self._included

    def is_interrupting(self, step: Step) -> bool:
        return step.index == 0 and self.flow_of(step).interrupting

    def ends_flow_of(self, use_case: str, step: Step | None) -> bool:
        """Whether ``step`` is the last step of some flow of ``use_case``."""

        if step is None or step.use_case != use_case:
            return False
        return self.flow_of(step).last_step is step

    def predecessor_context(self, step: Step) -> Step | None:
        """The step after which ``step`` comes next, or None for "at start".

        Flow heads positioned ``After(X)`` resolve to X, ``InsteadOf(X)`` to
        X's own predecessor context.
        """

        if step.previous is not None:
            return self.get_step(step.use_case, step.previous)
        position = self.flow_of(step).position
        if isinstance(position, After):
            return self.get_step(step.use_case, position.step)
        if isinstance(position, InsteadOf):
            return self.predecessor_context(self.get_step(step.use_case, position.step))
        return None

    def __repr__(self) -> str:
        names = ", ".join(repr(uc.name) for uc in self._use_cases)
        return f"Model([{names}])"
