"""Unit tests for the command line interface."""

import logging
from pathlib import Path

import pytest

from reqflow import ReqflowError
from reqflow.main import load_model, main
from reqflow.model import Model

GREETED = "examples.get_greeted:build_model"


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def test_load_model_from_callable() -> None:
    model = load_model(GREETED)

    assert isinstance(model, Model)
    assert model.has_use_case("Get greeted")


@pytest.mark.parametrize(
    "reference",
    [
        "examples.get_greeted",
        "examples.get_greeted:missing",
        "examples.get_greeted:DecidesToQuit",
    ],
)
def test_load_model_rejects_bad_references(reference: str) -> None:
    with pytest.raises(ReqflowError):
        load_model(reference)


def test_steps_command(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["steps", "--model", GREETED]) == 0

    out = capsys.readouterr().out
    assert out.splitlines() == [
        "Get greeted",
        "  Basic flow",
        "    S1",
        "    S2",
        "    S3",
        "    S4",
        "  Greet again (Instead of S4, when user has rounds left)",
        "    S5",
        "    S6",
    ]


def test_extract_writes_to_configured_docs_path(
    clean_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("REQFLOW_DOCS_PATH", str(clean_env / "out" / "greeted.md"))

    assert main(["extract", "--model", GREETED, "--title", "Greeting"]) == 0

    written = clean_env / "out" / "greeted.md"
    assert written.read_text(encoding="utf-8").startswith("# Greeting\n\n## Get greeted\n")
    assert capsys.readouterr().out.strip() == f"Wrote {written}"


def test_extract_to_explicit_output(clean_env: Path) -> None:
    output = clean_env / "model.md"

    assert main(["extract", "--model", GREETED, "--output", str(output)]) == 0
    assert "### Alternative flow: Greet again" in output.read_text(encoding="utf-8")


def test_extract_to_stdout(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["extract", "--model", GREETED, "--stdout"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("# Use cases\n")
    assert "2. S2: User enters name. System greets user." in out
    assert not (clean_env / "docs").exists()


def test_unknown_model_module_returns_1(clean_env: Path) -> None:
    assert main(["steps", "--model", "no_such_module_here:model"]) == 1


def test_invalid_settings_return_2(
    clean_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("REQFLOW_AMBIGUITY_POLICY", "random")

    assert main(["steps", "--model", GREETED]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        main([])
