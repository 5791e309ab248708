"""Use case model: actors, use cases, flows and steps.

The model is declared with :class:`ModelBuilder` and is immutable once built.
"""

from reqflow.model.elements import (
    BASIC_FLOW,
    Actor,
    After,
    Anytime,
    AtStart,
    Flow,
    InsteadOf,
    Step,
    UseCase,
)
from reqflow.model.continuations import (
    ContinuesAfter,
    ContinuesAt,
    ContinuesWithoutAlternativeAt,
    IncludesUseCase,
    Restarts,
)
from reqflow.model.model import Model
from reqflow.model.builder import REPEAT_SUFFIX, ModelBuilder

__all__ = [
    "BASIC_FLOW",
    "REPEAT_SUFFIX",
    "Actor",
    "After",
    "Anytime",
    "AtStart",
    "ContinuesAfter",
    "ContinuesAt",
    "ContinuesWithoutAlternativeAt",
    "Flow",
    "IncludesUseCase",
    "InsteadOf",
    "Model",
    "ModelBuilder",
    "Restarts",
    "Step",
    "UseCase",
]
