"""Commands for generating and cleaning up test agent files."""

import typer
from rich.table import Table

from src.debugkit.agents import (
    TEMPLATES,
    cleanup_test_agents,
    create_test_agent,
    from_template,
    list_test_agents,
)
from src.debugkit.runtime.context import get_config

from .utils import console, fail

agents_app = typer.Typer(help="Generate and manage test agent definition files")


@agents_app.command("create")
def create(
    template: str = typer.Argument(..., help=f"Template: {', '.join(TEMPLATES)}"),
    name: str | None = typer.Option(None, "--name", "-n", help="Agent name (default from template)"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model alias"),
    tasks: list[str] | None = typer.Option(None, "--task", "-t", help="Specific task, repeatable"),
) -> None:
    """Write a test agent from a built-in template."""
    testing = get_config().testing
    if template not in TEMPLATES:
        fail(f"Unknown agent template: {template}. Choose from: {', '.join(TEMPLATES)}")

    # Generated agents carry the test- prefix so cleanup can find them
    definition = from_template(
        template,
        name=name or f"test-{TEMPLATES[template].name}",
        model=model or testing.agent_model,
    )

    created = create_test_agent(testing.agents_dir, definition, tasks=tasks)
    console.print(f"[green]✅ Created agent {created.name} at {created.path}[/green]")


@agents_app.command("list")
def list_agents() -> None:
    """List agent files in the test agents directory."""
    directory = get_config().testing.agents_dir
    agents = list_test_agents(directory)
    if not agents:
        console.print(f"[yellow]No agents found in {directory}[/yellow]")
        return

    table = Table(title=f"Agents in {directory}")
    table.add_column("Name", style="cyan")
    table.add_column("Model", style="magenta")
    table.add_column("Tools", style="green")
    table.add_column("Description")
    for agent in agents:
        table.add_row(agent.name, agent.model, ", ".join(agent.tools), agent.description)
    console.print(table)


@agents_app.command("cleanup")
def cleanup() -> None:
    """Remove generated test- and TEST_ agent files."""
    directory = get_config().testing.agents_dir
    removed = cleanup_test_agents(directory)
    console.print(f"[green]🤖 Removed {len(removed)} test agent files from {directory}[/green]")
