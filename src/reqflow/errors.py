"""Exception hierarchy for model authoring and runner dispatch."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reqflow.model.elements import Step


class ReqflowError(Exception):
    pass


class ModelError(ReqflowError, ValueError):
    """The model as declared is not valid."""


class ElementAlreadyInModelError(ModelError):
    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} already in model: {name!r}")
        self.kind = kind
        self.name = name


class NoSuchElementInModelError(ModelError):
    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"No such {kind} in model: {name!r}")
        self.kind = kind
        self.name = name


class IncompleteStepError(ModelError):
    """Raised for builder calls made in the wrong order or with missing parts."""


class AmbiguousStepsError(ReqflowError):
    """More than one step can react and no precedence rule separates them."""

    def __init__(self, steps: Sequence[Step]) -> None:
        names = ", ".join(f"{s.use_case}/{s.name}" for s in steps)
        super().__init__(f"More than one step can react: {names}")
        self.steps = tuple(steps)


class RunnerNotBoundError(ReqflowError, RuntimeError):
    pass
