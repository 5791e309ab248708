#!/usr/bin/env python3
"""Console example: get greeted, then quit or start over.

The basic flow prompts for a name, greets the user and quits once the user
decides to. An alternative flow replaces quitting with another round while
the user has rounds left.

The model can also be documented without running it:

    reqflow extract --model examples.get_greeted:build_model --stdout
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from reqflow import Model, ModelBuilder, ModelRunner, ReqflowSettings, RunnerState
from reqflow.logging import configure_logging


@dataclass(frozen=True, slots=True)
class EntersName:
    name: str


@dataclass(frozen=True, slots=True)
class DecidesToQuit:
    pass


class GreetingConsole:
    def __init__(self, *, rounds: int = 1, output: Callable[[str], object] = print) -> None:
        self.rounds_left = rounds
        self.output = output
        self.running = True

    def prompts_user_to_enter_name(self) -> None:
        self.output("Please enter your name:")

    def greets_user(self, event: EntersName) -> None:
        self.output(f"Hello, {event.name}. Type 'quit' when you are done.")

    def user_has_rounds_left(self, _state: RunnerState) -> bool:
        return self.rounds_left > 0

    def starts_next_round(self) -> None:
        self.rounds_left -= 1

    def quits(self) -> None:
        self.output("Bye.")
        self.running = False


def build_model(console: GreetingConsole | None = None) -> Model:
    console = console or GreetingConsole()
    return (
        ModelBuilder()
        .use_case("Get greeted")
        .basic_flow()
        .step("S1").system(console.prompts_user_to_enter_name)
        .step("S2").user(EntersName).system(console.greets_user)
        .step("S3").user(DecidesToQuit)
        .step("S4").system(console.quits)
        .flow("Greet again").instead_of("S4").when(console.user_has_rounds_left)
        .step("S5").system(console.starts_next_round)
        .step("S6").continues_at("S1")
        .build()
    )


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Get greeted (reqflow console example).")
    parser.add_argument("--rounds", type=int, default=1, help="Extra rounds before quitting")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ReqflowSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    console = GreetingConsole(rounds=args.rounds)
    runner = ModelRunner(settings).start_recording()
    runner.bind(build_model(console))

    while console.running:
        text = input().strip()
        runner.dispatch(DecidesToQuit() if text.lower() == "quit" else EntersName(text))

    print("Steps run:", ", ".join(runner.recorded_step_names()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
