"""SQL migration runner.

Migrations are plain ``NNN_name.sql`` files with a paired ``NNN_name_rollback.sql``.
The runner does not track applied versions; it executes one file inside a single
transaction and reports how far it got.
"""

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.debugkit.core.errors import MigrationNotFoundError
from src.debugkit.core.services.database.db_connection import DatabaseConnectionService
from src.debugkit.runtime.config.config_data import ConfigData

ROLLBACK_SUFFIX = "_rollback.sql"

_DOLLAR_TAG = re.compile(r"\$[A-Za-z_][A-Za-z0-9_]*\$|\$\$")
_BLOCK_COMMENT = re.compile(r"/\*.*?(?:\*/|\Z)", re.DOTALL)


@dataclass
class MigrationResult:
    file: Path
    rollback: bool
    success: bool
    statements_executed: int = 0
    error: str | None = None


def resolve_migration_file(path: str | Path, rollback: bool = False) -> Path:
    """Return the file to execute, switching to the rollback script when asked.

    Raises:
        MigrationNotFoundError: If the resolved file does not exist.
    """
    migration = Path(path)
    if rollback and not migration.name.endswith(ROLLBACK_SUFFIX) and migration.suffix == ".sql":
        migration = migration.with_name(migration.stem + ROLLBACK_SUFFIX)

    if not migration.is_file():
        raise MigrationNotFoundError(f"Migration file not found: {migration}")
    return migration


def list_migrations(directory: str | Path) -> list[str]:
    """Sorted ``.sql`` file names in ``directory``; empty if it does not exist."""
    folder = Path(directory)
    if not folder.is_dir():
        return []
    return sorted(p.name for p in folder.iterdir() if p.is_file() and p.suffix == ".sql")


def _is_comment_only(fragment: str) -> bool:
    fragment = _BLOCK_COMMENT.sub("", fragment)
    return all(
        not line.strip() or line.strip().startswith("--") for line in fragment.splitlines()
    )


def split_sql_statements(sql: str) -> list[str]:
    """Split a script on ``;`` while respecting quotes, dollar quotes and comments.

    Function bodies written as ``$$ ... $$`` (or ``$tag$ ... $tag$``) stay intact.
    ``--`` line comments and ``/* ... */`` block comments are copied through
    unsplit. Empty and comment-only fragments are dropped.
    """
    statements: list[str] = []
    current: list[str] = []
    dollar_tag: str | None = None
    in_string = False
    i = 0

    def push() -> None:
        fragment = "".join(current).strip()
        current.clear()
        if fragment and not _is_comment_only(fragment):
            statements.append(fragment)

    while i < len(sql):
        ch = sql[i]

        if dollar_tag is not None:
            if sql.startswith(dollar_tag, i):
                current.append(dollar_tag)
                i += len(dollar_tag)
                dollar_tag = None
            else:
                current.append(ch)
                i += 1
            continue

        if in_string:
            current.append(ch)
            if ch == "'":
                in_string = False
            i += 1
            continue

        if sql.startswith("--", i):
            end = sql.find("\n", i)
            end = len(sql) if end == -1 else end
            current.append(sql[i:end])
            i = end
            continue

        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = len(sql) if end == -1 else end + 2
            current.append(sql[i:end])
            i = end
            continue

        if ch == "'":
            in_string = True
        elif ch == "$":
            match = _DOLLAR_TAG.match(sql, i)
            if match:
                dollar_tag = match.group()
                current.append(dollar_tag)
                i = match.end()
                continue
        elif ch == ";":
            push()
            i += 1
            continue

        current.append(ch)
        i += 1

    push()
    return statements


class MigrationRunner:
    """Execute migration files against the configured database."""

    def __init__(
        self,
        service: DatabaseConnectionService,
        config: ConfigData,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._service = service
        self._config = config
        self._sleep = sleep

    def is_production_target(self) -> bool:
        url = self._config.database.connection_string
        return any(marker in url for marker in self._config.migrations.production_markers)

    def run(self, path: str | Path, rollback: bool = False) -> MigrationResult:
        """Run one migration file in a single transaction.

        The transaction commits only if every statement succeeds; the first
        failure rolls everything back.

        Raises:
            MigrationNotFoundError: If the migration (or its rollback) is missing.
        """
        migration = resolve_migration_file(path, rollback)
        operation = "Rolling back" if rollback else "Running"
        logger.info("{} migration {}", operation, migration.name)

        sql = migration.read_text(encoding="utf-8")
        if not sql.strip():
            logger.error("Migration file {} is empty", migration)
            return MigrationResult(
                file=migration, rollback=rollback, success=False, error="Migration file is empty"
            )

        statements = split_sql_statements(sql)
        if not statements:
            return MigrationResult(
                file=migration,
                rollback=rollback,
                success=False,
                error="Migration file contains no statements",
            )

        if self.is_production_target():
            grace = self._config.migrations.grace_period_seconds
            logger.warning(
                "Migration targets a production Supabase instance, proceeding in {}s",
                grace,
            )
            self._sleep(grace)

        executed = 0
        with self._service.connect() as connection:
            transaction = connection.begin()
            try:
                for statement in statements:
                    connection.exec_driver_sql(statement)
                    executed += 1
            except SQLAlchemyError as e:
                transaction.rollback()
                message = str(getattr(e, "orig", None) or e)
                logger.error(
                    "Migration {} failed at statement {}: {}", migration.name, executed + 1, message
                )
                return MigrationResult(
                    file=migration,
                    rollback=rollback,
                    success=False,
                    statements_executed=executed,
                    error=message,
                )
            transaction.commit()

        logger.info("Migration {} executed {} statements", migration.name, executed)
        return MigrationResult(
            file=migration, rollback=rollback, success=True, statements_executed=executed
        )
