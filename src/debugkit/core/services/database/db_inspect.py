"""Catalog queries for listing tables, summarising a Postgres database and exporting its schema."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import Connection, text
from sqlalchemy.exc import SQLAlchemyError

GET_TABLES_QUERY = text(
    """
    SELECT schemaname, tablename, tableowner, hasindexes, hasrules, hastriggers, rowsecurity
    FROM pg_tables
    WHERE schemaname NOT IN ('information_schema', 'pg_catalog', 'pg_toast')
    ORDER BY schemaname, tablename
    """
)

GET_COLUMNS_QUERY = text(
    """
    SELECT column_name, data_type, is_nullable, column_default,
           character_maximum_length, numeric_precision, numeric_scale
    FROM information_schema.columns
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ordinal_position
    """
)

GET_ROW_COUNT_QUERY = text(
    """
    SELECT n_live_tup AS row_count_estimate
    FROM pg_stat_user_tables
    WHERE schemaname = :schema AND relname = :table
    """
)

GET_CONSTRAINTS_QUERY = text(
    """
    SELECT tc.constraint_name, tc.constraint_type, kcu.column_name,
           ccu.table_name AS foreign_table_name, ccu.column_name AS foreign_column_name
    FROM information_schema.table_constraints tc
    LEFT JOIN information_schema.key_column_usage kcu
      ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema
    LEFT JOIN information_schema.constraint_column_usage ccu
      ON ccu.constraint_name = tc.constraint_name AND ccu.table_schema = tc.table_schema
    WHERE tc.table_schema = :schema AND tc.table_name = :table
    ORDER BY tc.constraint_type, tc.constraint_name
    """
)


@dataclass
class TableSummary:
    schema: str
    name: str
    owner: str
    has_indexes: bool
    has_rules: bool
    has_triggers: bool
    row_security: bool

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"


@dataclass
class ColumnInfo:
    name: str
    data_type: str
    nullable: bool
    default: str | None = None
    max_length: int | None = None
    precision: int | None = None
    scale: int | None = None

    @property
    def type_label(self) -> str:
        if self.max_length:
            return f"{self.data_type}({self.max_length})"
        if self.precision and self.scale is not None and self.data_type == "numeric":
            return f"{self.data_type}({self.precision},{self.scale})"
        return self.data_type


@dataclass
class ConstraintInfo:
    name: str
    type: str
    column: str | None
    foreign_table: str | None = None
    foreign_column: str | None = None


@dataclass
class TableDetail:
    table: TableSummary
    columns: list[ColumnInfo] = field(default_factory=list)
    constraints: list[ConstraintInfo] = field(default_factory=list)
    row_count_estimate: int | None = None


@dataclass
class HealthCheck:
    name: str
    passed: bool
    detail: str = ""


@dataclass
class DatabaseInfo:
    version: str
    database: str
    server_time: Any
    size: str | None
    current_user: str
    session_user: str
    schemas: list[str] = field(default_factory=list)
    extensions: list[tuple[str, str]] = field(default_factory=list)
    table_stats: list[dict[str, Any]] = field(default_factory=list)
    connections: dict[str, int] = field(default_factory=dict)
    checks: list[HealthCheck] = field(default_factory=list)


def list_tables(connection: Connection) -> list[TableSummary]:
    """List user tables outside the system schemas."""
    rows = connection.execute(GET_TABLES_QUERY).mappings().all()
    return [
        TableSummary(
            schema=row["schemaname"],
            name=row["tablename"],
            owner=row["tableowner"],
            has_indexes=bool(row["hasindexes"]),
            has_rules=bool(row["hasrules"]),
            has_triggers=bool(row["hastriggers"]),
            row_security=bool(row["rowsecurity"]),
        )
        for row in rows
    ]


def describe_table(connection: Connection, table: TableSummary) -> TableDetail:
    """Collect columns, constraints and an estimated row count for ``table``."""
    params = {"schema": table.schema, "table": table.name}

    columns = [
        ColumnInfo(
            name=row["column_name"],
            data_type=row["data_type"],
            nullable=row["is_nullable"] == "YES",
            default=row["column_default"],
            max_length=row["character_maximum_length"],
            precision=row["numeric_precision"],
            scale=row["numeric_scale"],
        )
        for row in connection.execute(GET_COLUMNS_QUERY, params).mappings()
    ]
    constraints = [
        ConstraintInfo(
            name=row["constraint_name"],
            type=row["constraint_type"],
            column=row["column_name"],
            foreign_table=row["foreign_table_name"],
            foreign_column=row["foreign_column_name"],
        )
        for row in connection.execute(GET_CONSTRAINTS_QUERY, params).mappings()
    ]
    row_count = connection.execute(GET_ROW_COUNT_QUERY, params).scalar()

    return TableDetail(
        table=table,
        columns=columns,
        constraints=constraints,
        row_count_estimate=row_count,
    )


def run_health_check(connection: Connection, name: str, statements: list[str]) -> HealthCheck:
    """Run ``statements`` in a transaction that is always rolled back."""
    transaction = connection.begin_nested() if connection.in_transaction() else connection.begin()
    try:
        result = None
        for statement in statements:
            result = connection.execute(text(statement))
        value = result.scalar() if result is not None else None
        return HealthCheck(name=name, passed=True, detail=str(value))
    except SQLAlchemyError as e:
        logger.warning("Health check {} failed: {}", name, e)
        return HealthCheck(name=name, passed=False, detail=str(e).splitlines()[0])
    finally:
        transaction.rollback()


def database_info(connection: Connection) -> DatabaseInfo:
    """Summarise the server, its schemas and extensions, and run health checks."""
    version = connection.execute(text("SELECT version()")).scalar_one()
    database = connection.execute(text("SELECT current_database()")).scalar_one()
    server_time = connection.execute(text("SELECT NOW()")).scalar_one()

    try:
        size = connection.execute(
            text("SELECT pg_size_pretty(pg_database_size(current_database()))")
        ).scalar_one()
    except SQLAlchemyError as e:
        logger.warning("Could not read database size: {}", e)
        connection.rollback()
        size = None

    schemas = list(
        connection.execute(
            text(
                "SELECT schema_name FROM information_schema.schemata "
                "WHERE schema_name NOT LIKE 'pg_%' AND schema_name <> 'information_schema' "
                "ORDER BY schema_name"
            )
        ).scalars()
    )
    extensions = [
        (row[0], row[1])
        for row in connection.execute(
            text("SELECT extname, extversion FROM pg_extension ORDER BY extname")
        )
    ]
    table_stats = [
        dict(row)
        for row in connection.execute(
            text(
                "SELECT schemaname, relname, n_live_tup, n_dead_tup, seq_scan, idx_scan "
                "FROM pg_stat_user_tables ORDER BY n_live_tup DESC LIMIT 10"
            )
        ).mappings()
    ]
    connections = {
        (row[0] or "unknown"): int(row[1])
        for row in connection.execute(
            text(
                "SELECT state, COUNT(*) FROM pg_stat_activity "
                "WHERE datname = current_database() GROUP BY state"
            )
        )
    }
    users = connection.execute(text("SELECT current_user, session_user")).one()

    checks = [
        run_health_check(
            connection,
            "write",
            [
                "CREATE TEMP TABLE _health_check (id INT)",
                "INSERT INTO _health_check VALUES (1)",
                "SELECT COUNT(*) FROM _health_check",
            ],
        ),
        run_health_check(connection, "auth", ["SELECT current_user"]),
        run_health_check(connection, "catalog", ["SELECT COUNT(*) FROM pg_tables"]),
    ]

    return DatabaseInfo(
        version=version,
        database=database,
        server_time=server_time,
        size=size,
        current_user=users[0],
        session_user=users[1],
        schemas=schemas,
        extensions=extensions,
        table_stats=table_stats,
        connections=connections,
        checks=checks,
    )


def _cell(value: Any) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def render_schema_markdown(details: list[TableDetail], generated_at: datetime) -> str:
    """Render described tables as a Markdown schema document.

    Tables appear in the order given, each with a column table and, when it has
    any, a constraint list. Missing defaults are written as ``NULL``.
    """
    lines = [
        "# Database Schema Documentation",
        "",
        f"Generated: {generated_at.isoformat()}",
        "",
    ]
    for detail in details:
        table = detail.table
        lines += [f"## {table.qualified_name}", ""]
        facts = [f"Owner: {table.owner}", f"RLS: {'enabled' if table.row_security else 'disabled'}"]
        if detail.row_count_estimate is not None:
            facts.append(f"Estimated rows: {detail.row_count_estimate}")
        lines += [" | ".join(facts), ""]

        if detail.columns:
            lines += ["| Column | Type | Nullable | Default |", "|--------|------|----------|---------|"]
            for column in detail.columns:
                lines.append(
                    f"| {_cell(column.name)} | {_cell(column.type_label)} | "
                    f"{'YES' if column.nullable else 'NO'} | {_cell(column.default or 'NULL')} |"
                )
            lines.append("")

        if detail.constraints:
            lines += ["Constraints:", ""]
            for constraint in detail.constraints:
                target = (
                    f" -> {constraint.foreign_table}.{constraint.foreign_column}"
                    if constraint.type == "FOREIGN KEY"
                    else ""
                )
                lines.append(
                    f"- {constraint.type} `{constraint.name}` ({constraint.column}){target}"
                )
            lines.append("")

    return "\n".join(lines)


def schema_summary(details: list[TableDetail], generated_at: datetime) -> dict[str, Any]:
    """Counts and table names for an exported schema, ready for ``json.dumps``."""
    by_schema: dict[str, int] = {}
    for detail in details:
        by_schema[detail.table.schema] = by_schema.get(detail.table.schema, 0) + 1
    return {
        "exported_at": generated_at.isoformat(),
        "statistics": {
            "total_tables": len(details),
            "total_columns": sum(len(d.columns) for d in details),
            "tables_by_schema": by_schema,
        },
        "tables": sorted(d.table.qualified_name for d in details),
    }
