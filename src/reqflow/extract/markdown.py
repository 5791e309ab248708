"""Render a model as human-readable Markdown.

Only reads the model's structure (use cases, flows, ordered steps and their
event types, reactions and continuations); it never runs anything.
"""

from __future__ import annotations

import logging
from pathlib import Path

from reqflow.extract.words import (
    lower_case_words_of_callable,
    lower_case_words_of_class,
)
from reqflow.model.elements import After, Anytime, AtStart, Flow, InsteadOf, Step
from reqflow.model.model import Model

logger = logging.getLogger(__name__)


def render_markdown(model: Model, *, title: str = "Use cases") -> str:
    lines = [f"# {title}", ""]
    for use_case in model.use_cases:
        lines += [f"## {use_case.name}", ""]
        for flow in use_case.flows:
            if flow.basic and not flow.steps:
                continue
            lines += [f"### {_flow_heading(flow)}", ""]
            condition = flow_condition(flow)
            if condition:
                lines += [f"{condition}:", ""]
            for number, step in enumerate(flow.steps, start=1):
                lines.append(f"{number}. {step.name}: {step_sentence(model, step)}")
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def write_markdown(model: Model, path: Path, *, title: str = "Use cases") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_markdown(model, title=title), encoding="utf-8")
    logger.info("Use case documentation written", extra={"path": str(path)})
    return path


def flow_condition(flow: Flow) -> str:
    """E.g. "Instead of S4, when no alternative"; empty for unconditional flows."""

    parts: list[str] = []
    position = flow.position
    if isinstance(position, AtStart):
        parts.append("At start")
    elif isinstance(position, After):
        parts.append(f"After {position.step}")
    elif isinstance(position, InsteadOf):
        parts.append(f"Instead of {position.step}")
    elif isinstance(position, Anytime):
        parts.append("Anytime")

    if flow.when is not None:
        words = lower_case_words_of_callable(flow.when) or "the condition holds"
        parts.append(f"when {words}")

    text = ", ".join(parts)
    return text[:1].upper() + text[1:]


def step_sentence(model: Model, step: Step) -> str:
    sentences: list[str] = []
    if step.event_type is not None:
        event = lower_case_words_of_class(step.event_type)
        if step.actors == {model.system_actor}:
            sentences.append(f"System handles {event}.")
        else:
            sentences.append(f"{_actor_names(model, step)} {event}.")

    if step.reaction is not None:
        words = lower_case_words_of_callable(step.reaction)
        if words:
            sentences.append(f"System {words}.")

    if step.continuation is not None:
        sentences.append(f"{step.continuation.describe()}.")

    if step.raises is not None:
        words = lower_case_words_of_callable(step.raises)
        sentences.append(f"System raises {words}." if words else "System raises an event.")

    return " ".join(sentences) or "System reacts."


def _flow_heading(flow: Flow) -> str:
    if flow.basic:
        return flow.name
    if flow.flowless:
        return f"Step: {flow.name}"
    return f"Alternative flow: {flow.name}"


def _actor_names(model: Model, step: Step) -> str:
    names = sorted(actor.name for actor in step.actors if actor != model.system_actor)
    return " / ".join(names) or model.system_actor.name
