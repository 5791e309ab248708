"""Runner state handed to step predicates."""

from __future__ import annotations

from dataclasses import dataclass, replace

from reqflow.model.elements import Actor, Flow, Step


@dataclass(frozen=True, slots=True)
class IncludeFrame:
    """An included use case that has not handed control back yet."""

    use_case: str
    including_step: Step


@dataclass(frozen=True, slots=True)
class RunnerState:
    """Everything a step predicate may look at.

    The runner hands out a fresh snapshot for each evaluation, so predicates
    stay pure functions of this value.
    """

    actors: frozenset[Actor] = frozenset()
    latest_step: Step | None = None
    latest_flow: Flow | None = None
    includes: tuple[IncludeFrame, ...] = ()
    pinned_step: Step | None = None

    @property
    def at_start(self) -> bool:
        return self.latest_step is None and not self.includes

    @property
    def active_include(self) -> IncludeFrame | None:
        return self.includes[-1] if self.includes else None

    def moved_to(self, step: Step | None, flow: Flow | None) -> RunnerState:
        return replace(self, latest_step=step, latest_flow=flow)

    def cleared(self) -> RunnerState:
        return RunnerState(actors=self.actors)
