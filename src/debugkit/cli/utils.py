"""Console helpers shared by the command groups."""

from typing import NoReturn

import typer
from rich.console import Console

from src.debugkit.checks import CheckReport
from src.debugkit.core.services.error_tracking import capture_exception
from src.debugkit.core.services.tracing import current_correlation_id

console = Console()


def fail(message: str, error: BaseException | None = None, command: str | None = None) -> NoReturn:
    """Print ``message`` in red, report ``error`` to Sentry and exit with code 1.

    The report is tagged with the command and the open debug session's
    correlation id.
    """
    console.print(f"[red]❌ {message}[/red]")
    if error is not None:
        capture_exception(
            error,
            context={"tags": {"command": command or "debugkit"}},
            correlation_id=current_correlation_id(),
        )
    raise typer.Exit(code=1)


def status_icon(passed: bool) -> str:
    return "✅" if passed else "❌"


def render_report(report: CheckReport, verbose: bool = True) -> None:
    console.print(f"\n[bold blue]{report.title}[/bold blue]")
    console.print("=" * len(report.title))

    for result in report.results:
        console.print(f"\n{status_icon(result.passed)} [bold]{result.name}[/bold] ({result.duration_ms:.0f}ms)")
        if verbose or not result.passed:
            for detail in result.details:
                console.print(f"   - {detail}")
        if result.error:
            console.print(f"   [red]Error: {result.error}[/red]")

    console.print("\n📋 [bold]Summary[/bold]")
    console.print(f"[green]✅ Passed: {report.passed}[/green]")
    console.print(f"[red]❌ Failed: {report.failed}[/red]")
    console.print(f"⏱️  Total Time: {report.total_duration_ms / 1000:.2f}s")
