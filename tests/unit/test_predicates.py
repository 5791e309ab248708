"""Unit tests for step eligibility, evaluated on hand-built runner states."""

import pytest

from reqflow import ModelBuilder, RunnerState
from reqflow.model import Model, predicates
from reqflow.runner import IncludeFrame


class EntersText:
    pass


class ClicksButton:
    pass


@pytest.fixture
def model() -> Model:
    builder = ModelBuilder()
    builder.actor("Admin")
    return (
        builder.use_case("UC")
        .basic_flow()
        .step("S1").user(EntersText)
        .step("S2").user(EntersText)
        .step("S3").user(ClicksButton)
        .flow("Start over").at_start()
        .step("A1").user(ClicksButton)
        .flow("Replace S2").instead_of("S2").when(lambda _s: True)
        .step("B1").user(EntersText)
        .step("B2").user(EntersText)
        .flow("Blocked").after("S3").when(lambda _s: False)
        .step("C1").user(EntersText)
        .build()
    )


def _state(model: Model, latest: str | None = None, **kwargs) -> RunnerState:
    step = model.get_step("UC", latest) if latest else None
    flow = model.flow_of(step) if step else None
    actors = kwargs.pop("actors", frozenset({model.user_actor, model.system_actor}))
    return RunnerState(actors=actors, latest_step=step, latest_flow=flow, **kwargs)


def _eligible(model: Model, state: RunnerState) -> list[str]:
    return [step.name for step in model.steps if model.predicate(step)(state)]


def test_combinators() -> None:
    state = RunnerState()
    yes, no = predicates.always, predicates.negate(predicates.always)

    assert predicates.all_of(yes) is yes
    assert predicates.all_of(yes, yes)(state)
    assert not predicates.all_of(yes, no)(state)
    assert predicates.any_of(no, yes)(state)
    assert not predicates.any_of(no, no)(state)
    assert not no(state)


def test_at_start_only_heads_of_start_flows_are_eligible(model: Model) -> None:
    assert _eligible(model, _state(model)) == ["S1", "A1"]


def test_interrupting_flow_replaces_step(model: Model) -> None:
    state = _state(model, "S1")

    assert _eligible(model, state) == ["B1"]
    s2 = model.get_step("UC", "S2")
    assert predicates.reachability(model, s2)(state)
    assert not predicates.not_interrupted(model, s2)(state)


def test_interrupting_flow_is_not_eligible_from_inside_itself(model: Model) -> None:
    assert _eligible(model, _state(model, "B1")) == ["B2"]


def test_false_when_condition_keeps_flow_out(model: Model) -> None:
    assert _eligible(model, _state(model, "S3")) == []


def test_pinned_step_is_not_interrupted(model: Model) -> None:
    s2 = model.get_step("UC", "S2")
    state = _state(model, "S1", pinned_step=s2)

    assert _eligible(model, state) == ["S2", "B1"]


def test_pinned_step_is_reached_from_inside_the_alternative(model: Model) -> None:
    s2 = model.get_step("UC", "S2")
    state = _state(model, "B2", pinned_step=s2)

    assert _eligible(model, state) == ["S2"]
    assert predicates.pinned(s2)(state)
    assert not predicates.reachability(model, s2)(state)


def test_actor_must_be_acting(model: Model) -> None:
    admin = model.find_actor("Admin")
    state = _state(model, actors=frozenset({admin, model.system_actor}))

    assert _eligible(model, state) == []
    s1 = model.get_step("UC", "S1")
    assert not predicates.has_actor(s1)(state)


def test_after_included_step_waits_for_included_flow_to_end() -> None:
    model = (
        ModelBuilder()
        .use_case("Main")
        .basic_flow()
        .step("M1").includes_use_case("Included")
        .step("M2").user(EntersText)
        .use_case("Included")
        .basic_flow()
        .step("I1").user(EntersText)
        .step("I2").user(EntersText)
        .build()
    )
    m1 = model.get_step("Main", "M1")
    i1 = model.get_step("Included", "I1")
    i2 = model.get_step("Included", "I2")
    frame = IncludeFrame(use_case="Included", including_step=m1)
    actors = frozenset({model.user_actor, model.system_actor})

    just_included = RunnerState(
        actors=actors, latest_step=m1, latest_flow=model.flow_of(m1), includes=(frame,)
    )
    inside = RunnerState(
        actors=actors, latest_step=i1, latest_flow=model.flow_of(i1), includes=(frame,)
    )
    done = RunnerState(
        actors=actors, latest_step=i2, latest_flow=model.flow_of(i2), includes=(frame,)
    )

    assert _eligible(model, just_included) == ["I1"]
    assert _eligible(model, inside) == ["I2"]
    assert _eligible(model, done) == ["M2"]
    # The included use case cannot be entered on its own.
    assert _eligible(model, RunnerState(actors=actors)) == ["M1"]
    assert not just_included.at_start


def test_flowless_step_is_reachable_anywhere() -> None:
    model = (
        ModelBuilder()
        .use_case("UC")
        .basic_flow()
        .step("S1").user(EntersText)
        .flowless_step("Help").user(ClicksButton)
        .build()
    )
    actors = frozenset({model.user_actor, model.system_actor})
    s1 = model.get_step("UC", "S1")

    assert _eligible(model, RunnerState(actors=actors)) == ["S1", "Help"]
    assert _eligible(
        model, RunnerState(actors=actors, latest_step=s1, latest_flow=model.flow_of(s1))
    ) == ["Help"]
