"""Configuration models and loaders."""

from src.debugkit.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    DatabaseConfig,
    LogflareConfig,
    LoggingConfig,
    MigrationConfig,
    SentryConfig,
    SupabaseConfig,
    TestingConfig,
)
from src.debugkit.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)

__all__ = [
    "AppConfig",
    "ConfigData",
    "DatabaseConfig",
    "LogflareConfig",
    "LoggingConfig",
    "MigrationConfig",
    "SentryConfig",
    "SupabaseConfig",
    "TestingConfig",
    "load_templated_yaml",
    "substitute_env_vars",
]
