#!/usr/bin/env python3
"""Console example: enter name and age, as a normal or an anonymous user.

Shows actors, alternative flows that interrupt the basic flow, and a reaction
failure (non-numerical age) handled by a step of its own.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from reqflow import Model, ModelBuilder, ModelRunner, ReqflowSettings, RunnerState
from reqflow.logging import configure_logging

MIN_AGE = 5
MAX_AGE = 130

PROMPTS_FOR_FIRST_NAME = "System prompts user to enter first name"
ENTERS_FIRST_NAME = "User enters first name"
PROMPTS_FOR_AGE = "System prompts user to enter age"
ENTERS_AGE = "User enters age"
GREETS_WITH_FIRST_NAME = "System greets user with first name"
GREETS_WITH_AGE = "System greets user with age"
TERMINATES = "System terminates application"


@dataclass(frozen=True, slots=True)
class EntersText:
    text: str


class NameAndAgeConsole:
    def __init__(self, output: Callable[[str], object] = print) -> None:
        self.output = output
        self.first_name = ""
        self.age = 0
        self.running = True

    def prompts_user_to_enter_first_name(self) -> None:
        self.output("Please enter your first name:")

    def saves_first_name(self, event: EntersText) -> None:
        self.first_name = event.text

    def prompts_user_to_enter_age(self) -> None:
        self.output("Please enter your age:")

    def saves_age(self, event: EntersText) -> None:
        # ValueError for non-numerical input is handled by its own flow.
        self.age = int(event.text)

    def greets_user_with_first_name(self) -> None:
        self.output(f"Hello, {self.first_name}.")

    def greets_user_with_age(self) -> None:
        self.output(f"You are {self.age} years old.")

    def age_is_invalid(self, _state: RunnerState) -> bool:
        return not MIN_AGE <= self.age <= MAX_AGE

    def informs_user_about_invalid_age(self) -> None:
        self.output(f"Please enter your real age, between {MIN_AGE} and {MAX_AGE}.")

    def informs_user_about_non_numerical_age(self, _error: ValueError) -> None:
        self.output("You entered a non-numerical age.")

    def terminates_application(self) -> None:
        self.running = False


def build_model(console: NameAndAgeConsole | None = None) -> Model:
    console = console or NameAndAgeConsole()
    builder = ModelBuilder()
    normal_user = builder.actor("Normal User")
    anonymous_user = builder.actor("Anonymous User")

    return (
        builder.use_case("Get greeted")
        .basic_flow()
        .step(PROMPTS_FOR_FIRST_NAME).system(console.prompts_user_to_enter_first_name)
        .step(ENTERS_FIRST_NAME).actors(normal_user).user(EntersText)
        .system(console.saves_first_name)
        .step(PROMPTS_FOR_AGE).system(console.prompts_user_to_enter_age)
        .step(ENTERS_AGE).actors(normal_user, anonymous_user).user(EntersText)
        .system(console.saves_age)
        .step(GREETS_WITH_FIRST_NAME).system(console.greets_user_with_first_name)
        .step(GREETS_WITH_AGE).system(console.greets_user_with_age)
        .step(TERMINATES).system(console.terminates_application)
        .flow("Handle invalid age").after(ENTERS_AGE).when(console.age_is_invalid)
        .step("System informs user about invalid age")
        .system(console.informs_user_about_invalid_age)
        .continues_after(ENTERS_FIRST_NAME)
        .flow("Handle non-numerical age").after(ENTERS_AGE)
        .step("System informs user about non-numerical age")
        .actors(normal_user, anonymous_user).on(ValueError)
        .system(console.informs_user_about_non_numerical_age)
        .continues_after(ENTERS_FIRST_NAME)
        .flow("Anonymous user does not enter name").at_start()
        .step("Skip step to enter first name")
        .actors(anonymous_user).continues_after(ENTERS_FIRST_NAME)
        .flow("Anonymous user is greeted with name only").after(GREETS_WITH_FIRST_NAME)
        .step("Skip step to greet user with age")
        .actors(anonymous_user).continues_after(GREETS_WITH_AGE)
        .build()
    )


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Enter name and age (reqflow console example).")
    parser.add_argument("--anonymous", action="store_true", help="Run as the anonymous user")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ReqflowSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    console = NameAndAgeConsole()
    model = build_model(console)
    actor_name = "Anonymous User" if args.anonymous else "Normal User"
    actor = model.find_actor(actor_name)
    assert actor is not None

    runner = ModelRunner(settings).act_as(actor)
    runner.bind(model)
    while console.running:
        runner.dispatch(EntersText(input().strip()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
