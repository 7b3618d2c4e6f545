"""Application context.

The configuration is built once per process by :func:`load_config` and handed
to services explicitly. The context variable only exists so CLI entry points
and tests can share one instance without threading it through typer.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from loguru import logger

from src.debugkit.runtime.config.config_data import ConfigData
from src.debugkit.runtime.config.config_template import load_templated_yaml
from src.debugkit.runtime.settings import EnvironmentVariables


@dataclass
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


def load_config(path: Path | None = None) -> ConfigData:
    """Build the configuration from ``.env`` and config.yaml.

    A missing config.yaml is not fatal: defaults apply and every secret is
    left unset, which the validators report by name.
    """
    load_dotenv(find_dotenv(usecwd=True))
    env = EnvironmentVariables()
    config_path = Path(path or env.config_file)

    if not config_path.exists():
        logger.warning("Configuration file {} not found; using defaults", config_path)
        config = ConfigData()
    else:
        config = load_templated_yaml(config_path)

    if config.app.environment != env.environment:
        config = config.model_copy(
            update={"app": config.app.model_copy(update={"environment": env.environment})}
        )
    return config


_app_context: ContextVar[AppContext | None] = ContextVar("app_context", default=None)


def get_context() -> AppContext:
    """Get the current application context, loading it on first use."""
    context = _app_context.get()
    if context is None:
        context = AppContext(config=load_config())
        _app_context.set(context)
    return context


def set_context(context: AppContext) -> Token:
    """Set the current application context."""
    return _app_context.set(context)


def set_config(config: ConfigData) -> None:
    """Replace the configuration of the current context."""
    context = _app_context.get()
    if context is None:
        set_context(AppContext(config=config))
    else:
        set_context(replace(context, config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration."""
    return get_context().config


@contextmanager
def with_context(config: ConfigData):
    """Temporarily install ``config`` as the current configuration."""
    token = set_context(AppContext(config=config))
    try:
        yield config
    finally:
        _app_context.reset(token)
