"""Database inspection commands."""

import json
from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from src.debugkit.core.errors import ConfigurationError
from src.debugkit.core.services.database.db_connection import DatabaseConnectionService
from src.debugkit.core.services.database.db_inspect import (
    database_info,
    describe_table,
    list_tables,
    render_schema_markdown,
    schema_summary,
)
from src.debugkit.core.services.tracing import measure_performance
from src.debugkit.entities.product import ProductRepository
from src.debugkit.runtime.context import get_config

from .utils import console, fail, status_icon

db_app = typer.Typer(help="Inspect the Supabase Postgres database")


def get_database_service() -> DatabaseConnectionService:
    """Build a validated connection service or exit with the missing names."""
    try:
        return DatabaseConnectionService.validated(get_config())
    except ConfigurationError as e:
        for name in e.missing:
            console.print(f"[red]   - {name}[/red]")
        fail(str(e), e, command="db")


@db_app.command("check")
def check() -> None:
    """Connect, print the server time and count the products table."""
    service = get_database_service()
    try:
        with measure_performance("db check"):
            server_time = service.server_time()
        console.print(
            Panel.fit(
                f"[green]✅ Connected to {service.display_target}[/green]\n"
                f"Server time: {server_time}",
                title="PostgreSQL",
            )
        )
        try:
            with service.session_scope() as session:
                count = ProductRepository(session).count()
            console.print(f"📦 products table: {count} rows")
        except SQLAlchemyError:
            console.print("[yellow]⚠️  products table not found; run the migration first[/yellow]")
    except SQLAlchemyError as e:
        fail(f"PostgreSQL connection failed: {e}", e, command="db check")
    finally:
        service.dispose()


@db_app.command("tables")
def tables(
    details: bool = typer.Option(False, "--details", "-d", help="Show columns and constraints"),
) -> None:
    """List user tables with their flags and, optionally, their structure."""
    service = get_database_service()
    try:
        with service.connect() as connection:
            with measure_performance("list tables"):
                found = list_tables(connection)
            if not found:
                console.print("[yellow]No user tables found[/yellow]")
                return

            table = Table(title=f"Tables ({len(found)})")
            table.add_column("Table", style="cyan")
            table.add_column("Owner", style="green")
            table.add_column("Indexes")
            table.add_column("Triggers")
            table.add_column("RLS")
            for item in found:
                table.add_row(
                    item.qualified_name,
                    item.owner,
                    status_icon(item.has_indexes),
                    status_icon(item.has_triggers),
                    status_icon(item.row_security),
                )
            console.print(table)

            if details:
                for item in found:
                    _print_table_detail(describe_table(connection, item))
    except SQLAlchemyError as e:
        fail(f"Failed to list tables: {e}", e, command="db tables")
    finally:
        service.dispose()


def _print_table_detail(detail) -> None:
    columns = Table(title=f"{detail.table.qualified_name}", title_justify="left")
    columns.add_column("Column", style="cyan")
    columns.add_column("Type", style="magenta")
    columns.add_column("Nullable")
    columns.add_column("Default")
    for column in detail.columns:
        columns.add_row(
            column.name,
            column.type_label,
            "YES" if column.nullable else "NO",
            column.default or "",
        )
    console.print(columns)

    for constraint in detail.constraints:
        target = (
            f" -> {constraint.foreign_table}.{constraint.foreign_column}"
            if constraint.type == "FOREIGN KEY"
            else ""
        )
        console.print(f"   🔑 {constraint.type} {constraint.name} ({constraint.column}){target}")
    if detail.row_count_estimate is not None:
        console.print(f"   📊 ~{detail.row_count_estimate} rows")


@db_app.command("info")
def info() -> None:
    """Summarise the server, schemas, extensions and run health checks."""
    service = get_database_service()
    try:
        with service.connect() as connection:
            with measure_performance("database info"):
                summary = database_info(connection)
    except SQLAlchemyError as e:
        fail(f"Failed to read database info: {e}", e, command="db info")
    finally:
        service.dispose()

    console.print(
        Panel.fit(
            f"[bold]{summary.database}[/bold] ({summary.size or 'size unknown'})\n"
            f"{summary.version}\n"
            f"Server time: {summary.server_time}\n"
            f"User: {summary.current_user} (session: {summary.session_user})",
            title="Database Information",
        )
    )
    console.print(f"📁 Schemas: {', '.join(summary.schemas)}")
    if summary.extensions:
        console.print(
            "🧩 Extensions: " + ", ".join(f"{name} {version}" for name, version in summary.extensions)
        )
    if summary.connections:
        console.print(
            "🔌 Connections: "
            + ", ".join(f"{state}={count}" for state, count in summary.connections.items())
        )

    if summary.table_stats:
        stats = Table(title="Table Statistics")
        stats.add_column("Table", style="cyan")
        stats.add_column("Live rows", justify="right")
        stats.add_column("Dead rows", justify="right")
        stats.add_column("Seq scans", justify="right")
        stats.add_column("Index scans", justify="right")
        for row in summary.table_stats:
            stats.add_row(
                f"{row['schemaname']}.{row['relname']}",
                str(row["n_live_tup"]),
                str(row["n_dead_tup"]),
                str(row["seq_scan"]),
                str(row["idx_scan"] or 0),
            )
        console.print(stats)

    console.print("\n[bold]Health checks[/bold]")
    for check in summary.checks:
        console.print(f"  {status_icon(check.passed)} {check.name}: {check.detail}")
    if not all(c.passed for c in summary.checks):
        raise typer.Exit(code=1)


@db_app.command("export-schema")
def export_schema(
    output: Path = typer.Option(
        Path("database/schema_documentation.md"), "--output", "-o", help="Markdown file to write"
    ),
    schemas: list[str] | None = typer.Option(
        None, "--schema", "-s", help="Schema to include, repeatable (default: every user schema)"
    ),
    summary: bool = typer.Option(
        True, "--summary/--no-summary", help="Also write export_summary.json next to the document"
    ),
) -> None:
    """Write a Markdown document describing every user table."""
    service = get_database_service()
    try:
        with service.connect() as connection:
            with measure_performance("schema export", schemas=",".join(schemas or [])):
                found = [
                    table
                    for table in list_tables(connection)
                    if not schemas or table.schema in schemas
                ]
                details = [describe_table(connection, table) for table in found]
    except SQLAlchemyError as e:
        fail(f"Failed to export schema: {e}", e, command="db export-schema")
    finally:
        service.dispose()

    generated_at = datetime.now(UTC)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_schema_markdown(details, generated_at), encoding="utf-8")
    console.print(f"[green]✅ Schema documentation written to {output}[/green]")

    stats = schema_summary(details, generated_at)
    if summary:
        summary_path = output.with_name("export_summary.json")
        summary_path.write_text(json.dumps(stats, indent=2), encoding="utf-8")
        console.print(f"[green]✅ Export summary written to {summary_path}[/green]")

    console.print(f"  • Total tables: {stats['statistics']['total_tables']}")
    console.print(f"  • Total columns: {stats['statistics']['total_columns']}")
