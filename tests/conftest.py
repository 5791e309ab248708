"""Test configuration and fixtures."""

from pathlib import Path

import pytest

from reqflow import ModelRunner, ReqflowSettings

SETTINGS_ENV_VARS = (
    "LOG_LEVEL",
    "REQFLOW_LOG_JSON",
    "REQFLOW_AMBIGUITY_POLICY",
    "REQFLOW_RECORD_BY_DEFAULT",
    "REQFLOW_DOCS_PATH",
)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with no reqflow variables set."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(clean_env: Path) -> ReqflowSettings:
    """Provide default settings, unaffected by the environment."""
    return ReqflowSettings()


@pytest.fixture
def runner(settings: ReqflowSettings) -> ModelRunner:
    """Provide a recording runner that is not bound yet."""
    return ModelRunner(settings).start_recording()
