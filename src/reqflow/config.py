"""Settings for runners and the command line.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing here is required: every setting has a default, so a bare
`ReqflowSettings()` is always valid.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AmbiguityPolicy = Literal["error", "declaration_order"]


class ReqflowSettings(BaseSettings):
    """Settings for reqflow.

    Environment variables:
    - LOG_LEVEL                 (optional)
    - REQFLOW_LOG_JSON          (optional)
    - REQFLOW_AMBIGUITY_POLICY  (optional)
    - REQFLOW_RECORD_BY_DEFAULT (optional)
    - REQFLOW_DOCS_PATH         (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ReqflowSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="REQFLOW_LOG_JSON",
        description="Emit log records as JSON lines instead of plain text",
    )

    ambiguity_policy: AmbiguityPolicy = Field(
        default="error",
        validation_alias="REQFLOW_AMBIGUITY_POLICY",
        description=(
            "What a runner does when several steps can react and neither is interrupting: "
            "'error' raises AmbiguousStepsError, 'declaration_order' picks the step declared first."
        ),
    )
    record_by_default: bool = Field(
        default=False,
        validation_alias="REQFLOW_RECORD_BY_DEFAULT",
        description="Start recording executed steps as soon as a runner is created",
    )

    docs_path: Path = Field(
        default=Path("docs/usecases.md"),
        validation_alias="REQFLOW_DOCS_PATH",
        description="Default output file of `reqflow extract`",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level
