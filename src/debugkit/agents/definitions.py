"""Read and write agent definition files.

An agent file is markdown with a YAML front-matter block::

    ---
    name: database-test-agent
    description: Tests database operations and queries
    model: haiku
    color: blue
    tools:
    - Bash
    ---
    # Test Agent: database-test-agent
    ...

Only the front-matter contract is owned here; the body is free-form prose for
the agent host.
"""

import re
from dataclasses import dataclass
from pathlib import Path

import yaml
from loguru import logger
from pydantic import BaseModel, Field

CLEANUP_PREFIXES = ("test-", "TEST_")

_FRONT_MATTER = re.compile(r"\A---\r?\n(.*?)\r?\n---\r?\n?(.*)\Z", re.DOTALL)

_EXECUTION_GUIDELINES = """## Execution Guidelines

1. **Logging**: Log all operations with timestamps
2. **Error Handling**: Capture and report all errors
3. **Validation**: Verify all expected outcomes
4. **Performance**: Track execution times
5. **Cleanup**: Clean up any test data created

## Output Format

Return results in the following format:
- Test Name: [name]
- Status: [PASS/FAIL]
- Duration: [time in ms]
- Details: [specific results or errors]
"""


class AgentDefinition(BaseModel):
    """Front-matter fields plus the markdown body of an agent file."""

    name: str = Field(min_length=1, description="Agent identifier and file stem")
    description: str = Field(description="One-line summary shown by the host")
    model: str = Field(default="haiku", description="Model alias (haiku, sonnet, opus)")
    color: str = Field(default="gray", description="Terminal color for the agent")
    tools: list[str] = Field(default_factory=lambda: ["Bash"], description="Allowed tools")
    body: str = Field(default="", description="Markdown instructions")

    def front_matter(self) -> dict:
        return self.model_dump(exclude={"body"})


@dataclass
class AgentFile:
    name: str
    path: Path


def render_agent(definition: AgentDefinition) -> str:
    front = yaml.safe_dump(
        definition.front_matter(), sort_keys=False, default_flow_style=False
    )
    return f"---\n{front}---\n{definition.body}"


def parse_agent(text: str) -> AgentDefinition:
    """Parse an agent file.

    Raises:
        ValueError: If the front-matter block is missing or invalid.
    """
    match = _FRONT_MATTER.match(text)
    if not match:
        raise ValueError("Invalid agent file format")

    try:
        front = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid agent front-matter: {e}") from e
    if not isinstance(front, dict):
        raise ValueError("Agent front-matter must be a mapping")

    return AgentDefinition.model_validate({**front, "body": match.group(2).strip()})


def _write(directory: str | Path, definition: AgentDefinition) -> AgentFile:
    folder = Path(directory)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / f"{definition.name}.md"
    path.write_text(render_agent(definition), encoding="utf-8")
    logger.debug("Wrote agent {} to {}", definition.name, path)
    return AgentFile(name=definition.name, path=path)


def create_test_agent(
    directory: str | Path,
    definition: AgentDefinition,
    tasks: list[str] | None = None,
    additional_instructions: str = "",
) -> AgentFile:
    """Write a test agent, wrapping its instructions with the standard sections."""
    sections = [f"# Test Agent: {definition.name}", definition.body.strip() or definition.description]
    if tasks:
        numbered = "\n".join(f"{i}. {task}" for i, task in enumerate(tasks, start=1))
        sections.append(f"## Specific Tasks\n\n{numbered}")
    sections.append(_EXECUTION_GUIDELINES.strip())
    if additional_instructions:
        sections.append(additional_instructions.strip())

    body = "\n\n".join(sections) + "\n"
    return _write(directory, definition.model_copy(update={"body": body}))


def create_sleep_agent(
    directory: str | Path, name: str, sleep_seconds: int, model: str = "haiku"
) -> AgentFile:
    """Write an agent that only sleeps, for timing parallel task execution."""
    body = f"""# Test Agent: {name}

You are a test agent designed to simulate work by sleeping for {sleep_seconds} seconds.

## Instructions

When invoked, execute these exact steps:

```bash
echo "[{name}] Starting at $(date '+%H:%M:%S')"
sleep {sleep_seconds}
echo "[{name}] Completed at $(date '+%H:%M:%S')"
```

Then return: "Task {name} completed after {sleep_seconds} seconds of simulated work."
"""
    definition = AgentDefinition(
        name=name,
        description=f"Test agent that sleeps for {sleep_seconds} seconds",
        model=model,
        color="gray",
        tools=["Bash"],
        body=body,
    )
    return _write(directory, definition)


def create_test_orchestrator(
    directory: str | Path,
    agents: list[AgentDefinition],
    name: str = "test-orchestrator",
    model: str = "sonnet",
    strategy: str | None = None,
    additional_instructions: str = "",
) -> AgentFile:
    """Write an agent that coordinates ``agents``."""
    available = "\n".join(f"- {a.name}: {a.description}" for a in agents)
    body = f"""You are a test orchestration agent responsible for coordinating multiple test agents.

## Test Agents Available

{available}

## Execution Strategy

{strategy or "Execute tests based on dependencies and optimize for parallel execution where possible."}

## Reporting

Generate a final report with overall status, individual results, performance metrics and failure analysis.
"""
    definition = AgentDefinition(
        name=name,
        description="Orchestrates and coordinates multiple test agents",
        model=model,
        color="magenta",
        tools=["Task", "Bash", "Read", "Write", "TodoWrite"],
        body=body,
    )
    return create_test_agent(directory, definition, additional_instructions=additional_instructions)


def load_test_agent(directory: str | Path, name: str) -> AgentDefinition | None:
    path = Path(directory) / f"{name}.md"
    if not path.is_file():
        return None
    return parse_agent(path.read_text(encoding="utf-8"))


def list_test_agents(directory: str | Path) -> list[AgentDefinition]:
    folder = Path(directory)
    if not folder.is_dir():
        return []

    agents = []
    for path in sorted(folder.glob("*.md")):
        try:
            agents.append(parse_agent(path.read_text(encoding="utf-8")))
        except ValueError as e:
            logger.warning("Skipping agent file {}: {}", path.name, e)
    return agents


def delete_test_agent(directory: str | Path, name: str) -> bool:
    path = Path(directory) / f"{name}.md"
    if not path.is_file():
        return False
    path.unlink()
    return True


def cleanup_test_agents(
    directory: str | Path, prefixes: tuple[str, ...] = CLEANUP_PREFIXES
) -> list[Path]:
    """Remove files whose name starts with one of ``prefixes``.

    A missing directory is not an error; nothing is removed.
    """
    folder = Path(directory)
    if not folder.is_dir():
        return []

    removed = []
    for path in sorted(folder.iterdir()):
        if path.is_file() and path.name.startswith(prefixes):
            path.unlink()
            removed.append(path)
    logger.debug("Removed {} test agent files from {}", len(removed), folder)
    return removed
