"""Smoke-test commands: connectivity, products table and parallel timing."""

import asyncio
from pathlib import Path

import typer
from rich.table import Table

from src.debugkit.agents import (
    TEMPLATES,
    cleanup_test_agents,
    create_sleep_agent,
    create_test_orchestrator,
)
from src.debugkit.checks.connection_checks import run_connection_check
from src.debugkit.checks.connection_suite import ConnectionSuite
from src.debugkit.checks.product_checks import run_product_checks
from src.debugkit.checks.test_data import cleanup_test_data, initialize_test_data
from src.debugkit.core.errors import ConfigurationError
from src.debugkit.core.services.supabase_clients import (
    create_test_clients,
    create_validated_clients,
    validate_supabase_environment,
)
from src.debugkit.core.services.tracing import measure_performance
from src.debugkit.parallel import (
    TEST_SUITES,
    ExecutionMode,
    ParallelRunner,
    RunReport,
    TaskResult,
    analyze_timing,
    record_start,
)
from src.debugkit.runtime.context import get_config

from .utils import console, fail, render_report, status_icon

test_app = typer.Typer(help="Run connectivity and products table checks")
parallel_app = typer.Typer(help="Parallel execution runner and timing experiment")
test_app.add_typer(parallel_app, name="parallel")

SLEEP_AGENTS = 3
SLEEP_SECONDS = 10


@test_app.command("connection")
def connection(
    suite: bool = typer.Option(
        False, "--suite", help="Run the full connection suite against the test project"
    ),
) -> None:
    """Check environment variables, the Supabase API and direct Postgres."""
    config = get_config()

    if suite:
        missing = validate_supabase_environment(config.supabase)
        if missing:
            message = f"Missing required Supabase environment variables: {', '.join(missing)}"
            fail(
                message, ConfigurationError(message, missing=missing), command="test connection"
            )
        with measure_performance("connection suite"):
            report = ConnectionSuite(config).run()
    else:
        with measure_performance("connection check"):
            report = run_connection_check(config)

    render_report(report, verbose=config.testing.verbose or not suite)
    if not report.success:
        console.print("\n[yellow]⚠️  Some connections failed. Please check your configuration.[/yellow]")
        raise typer.Exit(code=1)
    console.print("\n🎉 All connections successful! Your setup is ready.")


@test_app.command("products")
def products() -> None:
    """Exercise the products table: structure, data, RLS, CRUD and constraints."""
    config = get_config()
    try:
        clients = create_validated_clients(config.supabase)
    except ConfigurationError as e:
        fail(str(e), e, command="test products")

    with measure_performance("product checks"):
        report = run_product_checks(clients)
    render_report(report)
    if not report.success:
        console.print("\n[yellow]⚠️  Some tests failed. Please review the error messages above.[/yellow]")
        raise typer.Exit(code=1)
    console.print("\n🎉 All tests passed! Your products table is working correctly.")


@test_app.command("seed")
def seed() -> None:
    """Insert the TEST_ sample products into the test project."""
    try:
        clients = create_test_clients(get_config().supabase)
    except ConfigurationError as e:
        fail(str(e), e, command="test seed")

    if not initialize_test_data(clients.admin):
        fail("Error initializing test data")
    console.print("[green]📦 Test data initialized[/green]")


@test_app.command("cleanup")
def cleanup(
    agents: bool = typer.Option(True, "--agents/--no-agents", help="Also remove generated test agents"),
) -> None:
    """Delete TEST_ products and, by default, generated test agents."""
    config = get_config()
    try:
        clients = create_test_clients(config.supabase)
    except ConfigurationError as e:
        fail(str(e), e, command="test cleanup")

    if not cleanup_test_data(clients.admin):
        fail("Error cleaning up test data")
    console.print("[green]🧹 Test data cleaned up[/green]")

    if agents and config.testing.agent_cleanup:
        removed = cleanup_test_agents(config.testing.agents_dir)
        console.print(f"[green]🤖 Removed {len(removed)} test agents[/green]")


def _print_result(result: TaskResult) -> None:
    console.print(f"  {status_icon(result.passed)} {result.suite}/{result.test} ({result.duration_s:.2f}s)")


def _print_run_report(report: RunReport) -> None:
    table = Table(title="Suite Results")
    table.add_column("Suite", style="cyan")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Duration", justify="right")
    for suite in report.suites:
        table.add_row(suite.name, str(suite.passed), str(suite.failed), f"{suite.duration_s:.2f}s")
    console.print(table)

    console.print("\n[cyan]Overall Summary:[/cyan]")
    console.print(f"  • Total Tests: {report.total_tests}")
    console.print(f"  • [green]Passed: {report.total_passed}[/green]")
    console.print(f"  • [red]Failed: {report.total_failed}[/red]")
    console.print(f"  • Success Rate: {report.success_rate:.1f}%")
    console.print(f"  • Total Duration: {report.total_duration_s:.2f}s")

    console.print("\n[cyan]Performance Analysis:[/cyan]")
    console.print(f"  • Sequential Time (estimated): {report.estimated_sequential_s:.2f}s")
    console.print(f"  • Actual Time: {report.total_duration_s:.2f}s")
    console.print(f"  • Parallel Speedup: {report.speedup:.2f}x")


@parallel_app.command("run")
def parallel_run(
    suites: list[str] | None = typer.Option(
        None, "--suite", "-s", help=f"Suite to run, repeatable ({', '.join(TEST_SUITES)})"
    ),
    sequential: bool = typer.Option(False, "--sequential", help="Run suites one after another"),
    orchestrator: bool = typer.Option(
        False, "--orchestrator", "-o", help="Also write a test orchestrator agent"
    ),
) -> None:
    """Run the simulated test suites and report the parallel speedup."""
    config = get_config()
    limit = config.testing.parallel_limit

    console.print("[bold magenta]Parallel Test Runner[/bold magenta]")
    console.print(f"  • Test Suites: {', '.join(suites or TEST_SUITES)}")
    console.print(f"  • Parallel Execution: {'Disabled' if sequential else 'Enabled'}")
    console.print(f"  • Batch Size: {limit}")

    if orchestrator:
        agents = [TEMPLATES[key] for key in ("database", "api", "integration", "performance")]
        created = create_test_orchestrator(
            config.testing.agents_dir, agents, name="test-main-orchestrator"
        )
        console.print(f"[green]✓ Orchestrator created: {created.path}[/green]")

    runner = ParallelRunner(parallel_limit=limit, on_result=_print_result)
    try:
        report = asyncio.run(runner.run(suites, parallel=not sequential))
    except ValueError as e:
        fail(str(e), e, command="test parallel run")

    _print_run_report(report)
    if not report.success:
        console.print("\n[yellow]⚠️  Review failed tests and fix issues[/yellow]")
        raise typer.Exit(code=1)
    console.print("\n[green]🎉 All tests passed successfully![/green]")


@parallel_app.command("start")
def parallel_start() -> None:
    """Write sleep agents and record the start time of the timing experiment."""
    testing = get_config().testing
    cleanup_test_agents(testing.agents_dir, prefixes=("test-agent-",))

    console.print("[cyan]Creating test agents...[/cyan]")
    for index in range(1, SLEEP_AGENTS + 1):
        agent = create_sleep_agent(
            testing.agents_dir, f"test-agent-{index}", SLEEP_SECONDS, model=testing.agent_model
        )
        console.print(f"[green]✓[/green] Created test agent: {agent.path}")

    console.print(f"\n• {SLEEP_AGENTS} agents, each sleeping for {SLEEP_SECONDS} seconds")
    console.print("• Expected time if parallel: ~10-15 seconds")
    console.print("• Expected time if sequential: ~30-35 seconds")
    console.print(
        f"\n[yellow]Invoke the {SLEEP_AGENTS} agents simultaneously from your agent host, "
        "then run:[/yellow] debugkit test parallel analyze"
    )

    started = record_start(testing.timing_file)
    console.print(f"[green]Test start time recorded: {started.isoformat()}[/green]")


@parallel_app.command("analyze")
def parallel_analyze() -> None:
    """Classify the time elapsed since ``parallel start``."""
    timing_file = Path(get_config().testing.timing_file)
    try:
        analysis = analyze_timing(timing_file)
    except FileNotFoundError as e:
        fail(
            f"No start time recorded at {timing_file}. Run: debugkit test parallel start",
            e,
            command="test parallel analyze",
        )

    console.print(f"• Start time: {analysis.start.isoformat()}")
    console.print(f"• End time: {analysis.end.isoformat()}")
    console.print(f"• Total duration: [bold]{analysis.duration_seconds} seconds[/bold]")

    if analysis.mode is ExecutionMode.PARALLEL:
        console.print("[green]✓ PARALLEL EXECUTION CONFIRMED[/green]")
    elif analysis.mode is ExecutionMode.SEQUENTIAL:
        console.print("[red]✗ SEQUENTIAL EXECUTION DETECTED[/red]")
    else:
        console.print("[yellow]⚠ INCONCLUSIVE RESULTS[/yellow]")
        console.print("  This could indicate partial parallelism or other factors.")
    console.print("[green]✓[/green] Cleaned up test files")
