"""Documentation extraction from a built model."""

from reqflow.extract.markdown import flow_condition, render_markdown, step_sentence, write_markdown
from reqflow.extract.words import (
    lower_case_words,
    lower_case_words_of_callable,
    lower_case_words_of_class,
)

__all__ = [
    "flow_condition",
    "lower_case_words",
    "lower_case_words_of_callable",
    "lower_case_words_of_class",
    "render_markdown",
    "step_sentence",
    "write_markdown",
]
