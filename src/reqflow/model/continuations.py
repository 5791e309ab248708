"""Follow-ups that move the runner after a step's reaction.

A continuation is deterministic: it only repositions the runner, it never
reacts to events itself. Target names are resolved in the step's use case and
were validated when the model was built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from reqflow.model.elements import Step
    from reqflow.runner.runner import ModelRunner


class Continuation(Protocol):
    def apply(self, runner: ModelRunner, step: Step) -> None: ...

    def describe(self) -> str: ...


@dataclass(frozen=True, slots=True)
class ContinuesAfter:
    """Continue as if ``target`` had just run."""

    target: str

    def apply(self, runner: ModelRunner, step: Step) -> None:
        runner.move_after(runner.model.get_step(step.use_case, self.target))

    def describe(self) -> str:
        return f"Continue after step {self.target}"


@dataclass(frozen=True, slots=True)
class ContinuesAt:
    """Continue so that ``target`` is next.

    Alternative flows that start instead of ``target`` may still be entered.
    """

    target: str

    def apply(self, runner: ModelRunner, step: Step) -> None:
        target = runner.model.get_step(step.use_case, self.target)
        runner.move_after(runner.model.predecessor_context(target))

    def describe(self) -> str:
        return f"Continue at step {self.target}"


@dataclass(frozen=True, slots=True)
class ContinuesWithoutAlternativeAt:
    """Make ``target`` the next step, ahead of any alternative to it.

    The runner stays on the continuing step, so alternative flows that start
    instead of ``target`` are not reached again.
    """

    target: str

    def apply(self, runner: ModelRunner, step: Step) -> None:
        runner.pin(runner.model.get_step(step.use_case, self.target))

    def describe(self) -> str:
        return f"Continue without alternative at step {self.target}"


@dataclass(frozen=True, slots=True)
class IncludesUseCase:
    """Enter the basic flow of another use case, then come back."""

    use_case: str

    def apply(self, runner: ModelRunner, step: Step) -> None:
        runner.include(runner.model.get_use_case(self.use_case), step)

    def describe(self) -> str:
        return f"Include use case {self.use_case}"


@dataclass(frozen=True, slots=True)
class Restarts:
    def apply(self, runner: ModelRunner, step: Step) -> None:
        runner.reset()

    def describe(self) -> str:
        return "Restart"
