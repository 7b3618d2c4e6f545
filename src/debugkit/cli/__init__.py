"""Main CLI application module."""

from pathlib import Path

import typer

from src.debugkit.core.services import error_tracking
from src.debugkit.core.services.logflare_sink import flush_logs
from src.debugkit.core.services.tracing import debug_session
from src.debugkit.runtime.context import load_config, set_config
from src.debugkit.runtime.logging_setup import configure_logging

from .agent_commands import agents_app
from .db_commands import db_app
from .migrate_commands import migrate_app
from .test_commands import test_app
from .utils import fail

# Create the main CLI application
app = typer.Typer(
    help="🛠️  debugkit - Supabase connectivity, migration and test tooling",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.add_typer(migrate_app, name="migrate")
app.add_typer(test_app, name="test")
app.add_typer(agents_app, name="agents")


def _shutdown() -> None:
    flush_logs()
    error_tracking.flush()


@app.callback()
def bootstrap(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="Path to config.yaml (default: $DEBUGKIT_CONFIG or ./config.yaml)"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Override the log level"),
    correlation_id: str | None = typer.Option(
        None, "--correlation-id", help="Tag logs and error reports with this id instead of a new UUID"
    ),
) -> None:
    """Load configuration once and run the command inside a debug session."""
    try:
        config = load_config(config_file)
    except ValueError as e:
        fail(f"Failed to load configuration: {e}")

    set_config(config)
    configure_logging(config, level=log_level)
    if error_tracking.initialize_sentry(config):
        ctx.call_on_close(_shutdown)
    else:
        ctx.call_on_close(flush_logs)
    ctx.with_resource(
        debug_session(correlation_id, command=ctx.invoked_subcommand or "debugkit")
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
