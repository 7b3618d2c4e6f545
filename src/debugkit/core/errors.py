"""Exceptions raised by debugkit itself.

Vendor errors (SQLAlchemy, postgrest, httpx) are not wrapped; they propagate as-is.
"""


class ConfigurationError(Exception):
    """Raised when required configuration is missing or still a placeholder."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class MigrationError(Exception):
    """Raised when a migration cannot be executed."""


class MigrationNotFoundError(MigrationError):
    """Raised when the requested migration file does not exist."""
