"""Runtime configuration for naws.

Settings are read from the environment (``NAWS_*`` plus the standard
``AWS_*`` variables boto3 also honours) and an optional ``.env`` file,
then validated by pydantic-settings.  CLI flags override them via
:meth:`NawsSettings.with_overrides`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from naws.exceptions import ValidationError

SelectorKind = Literal["auto", "fzf", "questionary"]


class NawsSettings(BaseSettings):
    """Central configuration shared by the CLI, infra and domain layers."""

    model_config = SettingsConfigDict(
        env_prefix="NAWS_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    profile: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NAWS_PROFILE", "AWS_PROFILE"),
        description="Named AWS profile; None uses the default credential chain.",
    )
    region: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NAWS_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"),
        description="AWS region for every client.",
    )
    endpoint_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NAWS_ENDPOINT_URL", "AWS_ENDPOINT_URL"),
        description="Override endpoint (e.g. LocalStack at http://localhost:4566).",
    )

    max_workers: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Thread workers for partition fan-out and batch actions.",
    )
    tail_interval: float = Field(
        default=2.0,
        gt=0,
        description="Seconds between log polls while tailing.",
    )

    selector: SelectorKind = Field(
        default="auto",
        description="Interactive selector backend; auto prefers fzf when on PATH.",
    )
    editor: str = Field(
        default="vi",
        validation_alias=AliasChoices("NAWS_EDITOR", "VISUAL", "EDITOR"),
        min_length=1,
        description="Editor command used to compose message bodies and overrides.",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional debug log file (rotated).",
    )

    def with_overrides(self, **overrides: object) -> NawsSettings:
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return self.model_copy(update=changes)


def load_settings() -> NawsSettings:
    """Build settings from the current environment.

    Raises
    ------
    ValidationError
        When an environment value is out of range or malformed.
    """
    try:
        return NawsSettings()
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(
            f"Invalid configuration: {problems}",
            hint="Check the NAWS_* environment variables and your .env file.",
        ) from exc
