"""Agent definition files: YAML front-matter plus a markdown body."""

from .definitions import (
    AgentDefinition,
    AgentFile,
    cleanup_test_agents,
    create_sleep_agent,
    create_test_agent,
    create_test_orchestrator,
    delete_test_agent,
    list_test_agents,
    load_test_agent,
    parse_agent,
    render_agent,
)
from .templates import TEMPLATES, from_template

__all__ = [
    "TEMPLATES",
    "AgentDefinition",
    "AgentFile",
    "cleanup_test_agents",
    "create_sleep_agent",
    "create_test_agent",
    "create_test_orchestrator",
    "delete_test_agent",
    "from_template",
    "list_test_agents",
    "load_test_agent",
    "parse_agent",
    "render_agent",
]
