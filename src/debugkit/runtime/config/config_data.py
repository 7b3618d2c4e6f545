"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
Secrets (Supabase keys, database password, Sentry DSN) reach these models through
``${VAR}`` substitution in config.yaml, never by reading the environment directly.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field

PASSWORD_PLACEHOLDER = "${SUPABASE_DB_PASSWORD}"


class AppConfig(BaseModel):
    """Application configuration model."""

    name: str = Field(default="debugkit", description="Service name used in logs")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    version: str = Field(default="1.0.0", description="Release identifier")


class LogflareConfig(BaseModel):
    """Logflare HTTP sink configuration."""

    enabled: bool = Field(default=False, description="Ship logs to Logflare")
    api_key: str | None = Field(default=None, description="Logflare API key")
    source_token: str | None = Field(default=None, description="Logflare source token")
    api_base_url: str = Field(
        default="https://api.logflare.app", description="Logflare API base URL"
    )
    batch_size: int = Field(default=10, description="Events buffered before a flush")
    flush_interval_ms: int = Field(
        default=1000, description="Maximum time an event waits in the buffer"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and self.api_key and self.source_token)


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    logflare: LogflareConfig = Field(
        default_factory=LogflareConfig, description="Logflare sink configuration"
    )


class DatabaseConfig(BaseModel):
    """Direct Postgres connection configuration."""

    url: str = Field(default="", description="Database connection URL (DATABASE_URL)")
    password: str | None = Field(
        default=None, description="Database password (SUPABASE_DB_PASSWORD)"
    )
    ssl_mode: str = Field(default="require", description="libpq sslmode for Postgres")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=5, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    connect_timeout: int = Field(default=10, description="Connect timeout in seconds")

    @computed_field
    @property
    def connection_string(self) -> str:
        """Resolve the password placeholder and normalise the URL scheme."""
        url = self.url
        if PASSWORD_PLACEHOLDER in url:
            if not self.password:
                logger.warning(
                    "DATABASE_URL references {} but no password is configured",
                    PASSWORD_PLACEHOLDER,
                )
            url = url.replace(PASSWORD_PLACEHOLDER, self.password or "")

        # SQLAlchemy only accepts the long scheme name
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url

    @property
    def is_postgres(self) -> bool:
        return self.connection_string.startswith("postgresql")

    def environment(self, supabase_url: str | None) -> dict[str, str | None]:
        """Return the values that back this section, keyed by variable name."""
        return {
            "SUPABASE_URL": supabase_url,
            "SUPABASE_DB_PASSWORD": self.password,
            "DATABASE_URL": self.url,
        }


class SupabaseConfig(BaseModel):
    """Supabase project endpoints and keys."""

    url: str | None = Field(default=None, description="SUPABASE_URL")
    anon_key: str | None = Field(default=None, description="SUPABASE_ANON_KEY")
    service_role_key: str | None = Field(
        default=None, description="SUPABASE_SERVICE_ROLE_KEY"
    )
    test_url: str | None = Field(default=None, description="SUPABASE_TEST_URL")
    test_anon_key: str | None = Field(
        default=None, description="SUPABASE_TEST_ANON_KEY"
    )
    test_service_role_key: str | None = Field(
        default=None, description="SUPABASE_TEST_SERVICE_ROLE_KEY"
    )

    @property
    def resolved_test_url(self) -> str | None:
        return self.test_url or self.url

    @property
    def resolved_test_anon_key(self) -> str | None:
        return self.test_anon_key or self.anon_key

    @property
    def resolved_test_service_role_key(self) -> str | None:
        return self.test_service_role_key or self.service_role_key

    def environment(self) -> dict[str, str | None]:
        """Return the configured values keyed by their environment variable name."""
        return {
            "SUPABASE_URL": self.url,
            "SUPABASE_SERVICE_ROLE_KEY": self.service_role_key,
            "SUPABASE_ANON_KEY": self.anon_key,
            "SUPABASE_TEST_URL": self.test_url,
            "SUPABASE_TEST_SERVICE_ROLE_KEY": self.test_service_role_key,
            "SUPABASE_TEST_ANON_KEY": self.test_anon_key,
        }


class SentryConfig(BaseModel):
    """Sentry error tracking configuration."""

    dsn: str | None = Field(default=None, description="SENTRY_DSN")
    traces_sample_rate: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Fraction of transactions traced"
    )
    enable_logs: bool = Field(default=True, description="Forward log records to Sentry")
    debug: bool = Field(default=False, description="Enable SDK debug output")
    environment: str | None = Field(
        default=None, description="Environment tag; defaults to app.environment"
    )
    release: str | None = Field(default=None, description="Release identifier")


class TestingConfig(BaseModel):
    """Knobs for the check suites and the parallel runner."""

    __test__ = False

    timeout_ms: int = Field(default=30000, description="Default wait timeout")
    retry_count: int = Field(default=3, description="Attempts made by retry helpers")
    parallel_limit: int = Field(default=5, description="Batch size for parallel suites")
    verbose: bool = Field(default=False, description="Print per-step progress")
    pool_size: int = Field(default=10, description="Clients used by the pooling check")
    agent_model: str = Field(default="haiku", description="Model for generated agents")
    agent_cleanup: bool = Field(default=True, description="Remove test agents on teardown")
    agents_dir: str = Field(
        default=".claude/agents/test", description="Directory for generated test agents"
    )
    timing_file: str = Field(
        default=".debugkit/parallel-test-start.txt",
        description="Where the timing experiment records its start time",
    )


class MigrationConfig(BaseModel):
    """Migration runner configuration."""

    directory: str = Field(
        default="database/migrations", description="Directory holding *.sql migrations"
    )
    production_markers: list[str] = Field(
        default_factory=lambda: ["supabase.com", "supabase.co"],
        description="URL fragments that mark a production target",
    )
    grace_period_seconds: float = Field(
        default=3.0, description="Pause before touching a production target"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(default_factory=AppConfig, description="Application configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    supabase: SupabaseConfig = Field(
        default_factory=SupabaseConfig, description="Supabase configuration"
    )
    sentry: SentryConfig = Field(
        default_factory=SentryConfig, description="Sentry configuration"
    )
    testing: TestingConfig = Field(
        default_factory=TestingConfig, description="Check suite configuration"
    )
    migrations: MigrationConfig = Field(
        default_factory=MigrationConfig, description="Migration configuration"
    )
