"""Built-in agent templates keyed by test area."""

from src.debugkit.agents.definitions import AgentDefinition

TEMPLATES: dict[str, AgentDefinition] = {
    "database": AgentDefinition(
        name="database-test-agent",
        description="Tests database operations and queries",
        color="blue",
        tools=["Bash", "Read", "Write"],
        body="""You are a database testing agent. Your role is to:
1. Connect to the database
2. Execute test queries
3. Validate results
4. Report any issues
""",
    ),
    "api": AgentDefinition(
        name="api-test-agent",
        description="Tests API endpoints and responses",
        color="green",
        tools=["Bash", "WebFetch"],
        body="""You are an API testing agent. Your role is to:
1. Make HTTP requests to endpoints
2. Validate response status codes
3. Check response data structure
4. Measure response times
""",
    ),
    "performance": AgentDefinition(
        name="performance-test-agent",
        description="Tests system performance and benchmarks",
        color="yellow",
        tools=["Bash", "Read"],
        body="""You are a performance testing agent. Your role is to:
1. Execute performance benchmarks
2. Measure execution times
3. Monitor resource usage
4. Identify bottlenecks
""",
    ),
    "integration": AgentDefinition(
        name="integration-test-agent",
        description="Tests integration between multiple systems",
        color="purple",
        tools=["Bash", "Read", "Write", "WebFetch"],
        body="""You are an integration testing agent. Your role is to:
1. Test communication between services
2. Verify data flow across systems
3. Check error handling
4. Validate end-to-end workflows
""",
    ),
    "parallel": AgentDefinition(
        name="parallel-test-agent",
        description="Tests parallel execution capabilities",
        color="cyan",
        tools=["Bash"],
        body="""You are a parallel execution test agent. Your role is to:
1. Simulate concurrent operations
2. Test race conditions
3. Verify synchronization
4. Measure parallelism efficiency
""",
    ),
}


def from_template(key: str, **overrides) -> AgentDefinition:
    """Copy a built-in template, replacing any of its fields.

    Raises:
        KeyError: If ``key`` is not a known template.
    """
    if key not in TEMPLATES:
        raise KeyError(f"Unknown agent template: {key}")
    return TEMPLATES[key].model_copy(update={k: v for k, v in overrides.items() if v is not None})
