"""CLI entrypoint.

Both commands take a model reference of the form ``package.module:attribute``,
where the attribute is a built :class:`~reqflow.model.model.Model` or a
zero-argument callable returning one.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from reqflow import __version__
from reqflow.config import ReqflowSettings
from reqflow.errors import ReqflowError
from reqflow.extract import flow_condition, render_markdown, write_markdown
from reqflow.logging import configure_logging
from reqflow.model.model import Model

logger = logging.getLogger(__name__)


def load_model(reference: str) -> Model:
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ReqflowError(f"Model reference must look like 'module:attribute', got {reference!r}")

    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attribute)
    except AttributeError as e:
        raise ReqflowError(f"Module {module_name!r} has no attribute {attribute!r}") from e

    model = target if isinstance(target, Model) else target() if callable(target) else None
    if not isinstance(model, Model):
        raise ReqflowError(f"{reference!r} does not provide a Model")
    return model


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reqflow",
        description="Inspect and document use case models",
    )
    parser.add_argument("--version", action="version", version=f"reqflow {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    steps = subparsers.add_parser("steps", help="List use cases, flows and steps of a model")
    steps.add_argument(
        "--model",
        required=True,
        help="Model reference in the form 'package.module:attribute'",
    )

    extract = subparsers.add_parser("extract", help="Write Markdown documentation of a model")
    extract.add_argument(
        "--model",
        required=True,
        help="Model reference in the form 'package.module:attribute'",
    )
    extract.add_argument(
        "--output",
        default=None,
        help="Output file (defaults to REQFLOW_DOCS_PATH, i.e. docs/usecases.md)",
    )
    extract.add_argument("--title", default="Use cases", help="Document title")
    extract.add_argument(
        "--stdout",
        action="store_true",
        help="Print the Markdown instead of writing a file",
    )

    return parser


def _print_steps(model: Model) -> None:
    for use_case in model.use_cases:
        print(use_case.name)
        for flow in use_case.flows:
            if not flow.steps:
                continue
            condition = flow_condition(flow)
            print(f"  {flow.name}" + (f" ({condition})" if condition else ""))
            for step in flow.steps:
                print(f"    {step.name}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ReqflowSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, json_output=settings.log_json)

    try:
        model = load_model(args.model)
    except (ImportError, ReqflowError) as e:
        logger.error("Could not load model", extra={"model": args.model, "error": str(e)})
        return 1

    if args.command == "steps":
        _print_steps(model)
        return 0

    if args.command == "extract":
        if args.stdout:
            sys.stdout.write(render_markdown(model, title=args.title))
            return 0
        output = Path(args.output) if args.output else settings.docs_path
        write_markdown(model, output, title=args.title)
        print(f"Wrote {output}")
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
