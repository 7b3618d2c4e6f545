"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.debugkit.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message

    Substituted values are not scanned again, so a value may itself carry a
    literal ``${...}`` (DATABASE_URL does, for the password).
    """

    def replacer(match: re.Match) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return _PLACEHOLDER.sub(replacer, text)


def _drop_blank(value):
    """Drop keys left blank by ``${VAR:-}`` so model defaults apply."""
    if isinstance(value, dict):
        return {
            k: _drop_blank(v)
            for k, v in value.items()
            if not (v is None or (isinstance(v, str) and not v.strip()))
        }
    if isinstance(value, list):
        return [_drop_blank(v) for v in value]
    return value


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed configuration with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the file is invalid
        FileNotFoundError: If the YAML file doesn't exist
    """
    content = Path(file_path).read_text(encoding="utf-8")

    env_mode = os.getenv("ENVIRONMENT", "development")
    logger.debug("Loading configuration for environment: {}", env_mode)

    # ENVIRONMENT-prefixed variables (e.g. TEST_DATABASE_URL when ENVIRONMENT=test)
    # shadow their unprefixed counterparts for this load only.
    prefix = f"{env_mode.upper()}_"
    overrides = {
        var[len(prefix) :]: value
        for var, value in os.environ.items()
        if var.startswith(prefix) and var[len(prefix) :]
    }
    if overrides:
        logger.debug("Applying environment-specific overrides: {}", sorted(overrides))

    saved = {name: os.environ.get(name) for name in overrides}
    os.environ.update(overrides)
    try:
        substituted_content = substitute_env_vars(content)
    finally:
        for name, value in saved.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value

    try:
        loaded = yaml.safe_load(substituted_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not loaded:
        raise ValueError("Failed to parse YAML")

    config_section = _drop_blank(loaded.get("config", {}))
    try:
        return ConfigData(**config_section)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
