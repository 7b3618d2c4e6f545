"""Direct database connection used by the migration runner and inspection commands."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from loguru import logger
from sqlalchemy import Connection, Engine, make_url, text
from sqlmodel import Session, create_engine

from src.debugkit.core.errors import ConfigurationError
from src.debugkit.runtime.config.config_data import ConfigData
from src.debugkit.runtime.settings import find_missing

REQUIRED_VARIABLES = ["SUPABASE_URL", "SUPABASE_DB_PASSWORD", "DATABASE_URL"]


def validate_database_environment(config: ConfigData) -> list[str]:
    """Return the names of required database variables that are missing."""
    values = config.database.environment(config.supabase.url)
    return find_missing(values, REQUIRED_VARIABLES)


class DatabaseConnectionService:
    def __init__(self, config: ConfigData, engine: Engine | None = None):
        """Create the engine for ``config.database`` unless one is supplied."""
        self._config = config
        db_config = config.database

        if engine is not None:
            self._engine = engine
            return

        if not db_config.url:
            raise ConfigurationError(
                "Missing required environment variable: DATABASE_URL",
                missing=["DATABASE_URL"],
            )

        engine_kwargs: dict = {
            "pool_pre_ping": True,
            "echo": False,
            "connect_args": self._get_connect_args(),
        }
        if db_config.is_postgres:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                }
            )

        logger.debug("Initializing database engine for {}", self.display_target)
        self._engine = create_engine(db_config.connection_string, **engine_kwargs)

    @classmethod
    def validated(cls, config: ConfigData) -> "DatabaseConnectionService":
        """Build the service after checking every required variable is present."""
        missing = validate_database_environment(config)
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing=missing,
            )
        return cls(config)

    def _get_connect_args(self) -> dict:
        db_config = self._config.database
        if db_config.is_postgres:
            return {
                "sslmode": db_config.ssl_mode,
                "connect_timeout": db_config.connect_timeout,
                "application_name": f"{self._config.app.name}_{self._config.app.environment}",
            }
        if db_config.connection_string.startswith("sqlite"):
            return {"check_same_thread": False}
        return {}

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def display_target(self) -> str:
        """The connection URL with the password masked."""
        return make_url(self._config.database.connection_string).render_as_string(
            hide_password=True
        )

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Yield a raw connection; the caller controls transactions."""
        with self._engine.connect() as connection:
            yield connection

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for repositories and tests."""
        db = Session(self._engine, expire_on_commit=False)
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed: {}: {}", type(e).__name__, e
            )
            raise
        finally:
            db.close()

    def server_time(self) -> datetime:
        """Return the server's current time (``SELECT NOW()``)."""
        with self.connect() as connection:
            return connection.execute(text("SELECT NOW()")).scalar_one()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed: {}: {}", type(e).__name__, e)
            return False

    def dispose(self) -> None:
        self._engine.dispose()
