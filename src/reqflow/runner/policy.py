"""Choosing the one step that reacts when several are eligible."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from reqflow.config import AmbiguityPolicy
from reqflow.errors import AmbiguousStepsError
from reqflow.model.elements import Step
from reqflow.runner.state import RunnerState


def choose_step(
    candidates: Sequence[Step],
    *,
    state: RunnerState,
    is_interrupting: Callable[[Step], bool],
    policy: AmbiguityPolicy = "error",
) -> Step | None:
    """Policy: (eligible steps, state) -> the one step that reacts.

    Candidates must be in declaration order. A step pinned by
    "continue without alternative" wins, then steps of interrupting flows win
    over the others. Whatever tie is left is settled by ``policy``.
    """

    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    if state.pinned_step is not None and state.pinned_step in candidates:
        return state.pinned_step

    interrupting = [step for step in candidates if is_interrupting(step)]
    remaining = interrupting or list(candidates)
    if len(remaining) == 1 or policy == "declaration_order":
        return remaining[0]
    raise AmbiguousStepsError(remaining)
