"""Migration commands."""

from pathlib import Path

import typer
from sqlalchemy.exc import SQLAlchemyError

from src.debugkit.core.errors import ConfigurationError, MigrationNotFoundError
from src.debugkit.core.services.database.db_connection import DatabaseConnectionService
from src.debugkit.core.services.database.migrations import (
    MigrationRunner,
    list_migrations,
    resolve_migration_file,
)
from src.debugkit.core.services.tracing import measure_performance
from src.debugkit.runtime.context import get_config

from .utils import console, fail

migrate_app = typer.Typer(help="Run SQL migrations and rollbacks")


@migrate_app.command("run")
def run(
    file: Path = typer.Argument(..., help="Migration file, e.g. database/migrations/001_create_products_table.sql"),
    rollback: bool = typer.Option(
        False, "--rollback", help="Run the paired *_rollback.sql instead"
    ),
) -> None:
    """Execute one migration file inside a single transaction."""
    config = get_config()

    try:
        migration = resolve_migration_file(file, rollback)
    except MigrationNotFoundError as e:
        fail(str(e), e, command="migrate run")

    console.print("🚀 Starting migration process...")
    console.print(f"📁 Migration file: {migration}")
    console.print(f"🔧 Operation: {'ROLLBACK' if rollback else 'FORWARD'}")

    try:
        service = DatabaseConnectionService(config)
    except ConfigurationError as e:
        fail(str(e), e, command="migrate run")

    runner = MigrationRunner(service, config)
    if runner.is_production_target():
        console.print(
            "\n[yellow]⚠️  WARNING: You are about to run a migration against a production "
            "Supabase instance!\n   Please ensure you have backups and have tested this migration.\n"
            f"   Proceeding in {config.migrations.grace_period_seconds:g} seconds...[/yellow]"
        )

    try:
        with measure_performance("migration", file=migration.name, rollback=rollback):
            result = runner.run(migration, rollback=rollback)
    except SQLAlchemyError as e:
        fail(f"Error during migration: {e}", e, command="migrate run")
    finally:
        service.dispose()

    if not result.success:
        console.print(f"[red]❌ Migration failed: {result.error}[/red]")
        if result.statements_executed:
            console.print(
                f"   Rolled back after {result.statements_executed} successful statements"
            )
        console.print("\n💥 Migration failed. Please check the error messages above.")
        raise typer.Exit(code=1)

    console.print(
        f"[green]✅ Migration {'rollback' if rollback else 'execution'} completed successfully "
        f"({result.statements_executed} statements)[/green]"
    )
    console.print("\n🎉 Migration completed successfully!")
    if not rollback:
        console.print("\n💡 Next steps:")
        console.print("   - Verify the changes in your Supabase dashboard")
        console.print("   - Test your application functionality")


@migrate_app.command("list")
def list_files(
    directory: Path | None = typer.Option(
        None, "--dir", "-d", help="Migrations directory (default from config)"
    ),
) -> None:
    """List available migration files."""
    folder = directory or Path(get_config().migrations.directory)
    names = list_migrations(folder)
    if not names:
        console.print(f"[yellow]No migrations found in {folder}[/yellow]")
        return

    console.print(f"📚 Available migrations in {folder}:")
    for name in names:
        console.print(f"  - {name}")
