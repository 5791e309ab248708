"""reqflow: use cases as code.

Declare use cases as ordered flows of steps, then let a runner decide, event
by event, which step reacts:
- :class:`ModelBuilder` declares an immutable :class:`Model`
- :class:`ModelRunner` dispatches events against it
- :mod:`reqflow.extract` renders the model as Markdown
"""

__version__ = "0.1.0"

from reqflow.config import ReqflowSettings
from reqflow.errors import (
    AmbiguousStepsError,
    ElementAlreadyInModelError,
    IncompleteStepError,
    ModelError,
    NoSuchElementInModelError,
    ReqflowError,
    RunnerNotBoundError,
)
from reqflow.model import Actor, Flow, Model, ModelBuilder, Step, UseCase
from reqflow.runner import ModelRunner, RunnerState

__all__ = [
    "__version__",
    "Actor",
    "AmbiguousStepsError",
    "ElementAlreadyInModelError",
    "Flow",
    "IncompleteStepError",
    "Model",
    "ModelBuilder",
    "ModelError",
    "ModelRunner",
    "NoSuchElementInModelError",
    "ReqflowError",
    "ReqflowSettings",
    "RunnerNotBoundError",
    "RunnerState",
    "Step",
    "UseCase",
]
