"""Turn class and function names into readable lower-case words."""

from __future__ import annotations

import re
from collections.abc import Callable

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def lower_case_words(name: str) -> str:
    """`EntersName` -> "enters name", `greets_user` -> "greets user"."""

    spaced = _WORD_BOUNDARY.sub(" ", name.replace("_", " "))
    return " ".join(spaced.lower().split())


def lower_case_words_of_class(cls: type) -> str:
    return lower_case_words(cls.__name__)


def lower_case_words_of_callable(fn: Callable[..., object]) -> str | None:
    """Words of a function's name, or None for lambdas and nameless callables."""

    name = getattr(fn, "__name__", None)
    if not name or name.startswith("<"):
        return None
    return lower_case_words(name) or None
