"""Process-level settings read from the environment and ``.env``.

Only the values needed before config.yaml can be located live here. Everything
else flows through config.yaml substitution into ``ConfigData``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values copied from .env.example still contain this marker
PLACEHOLDER_MARKER = "your-"


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development"
    )
    log_level: str = Field(default="INFO")
    config_file: str = Field(default="config.yaml", validation_alias="DEBUGKIT_CONFIG")


def find_missing(values: Mapping[str, str | None], required: Iterable[str]) -> list[str]:
    """Return the names in ``required`` that are unset or still hold a placeholder."""
    return [
        key
        for key in required
        if not values.get(key) or PLACEHOLDER_MARKER in (values.get(key) or "")
    ]
