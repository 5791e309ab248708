"""Runtime side: dispatching events against a bound model."""

from reqflow.runner.state import IncludeFrame, RunnerState
from reqflow.runner.policy import choose_step
from reqflow.runner.runner import ModelRunner

__all__ = ["IncludeFrame", "ModelRunner", "RunnerState", "choose_step"]
