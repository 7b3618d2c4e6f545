"""Environment, Supabase and direct Postgres connectivity checks."""

from collections.abc import Callable

from postgrest.exceptions import APIError
from supabase import Client

from src.debugkit.checks.results import CheckReport, CheckResult, run_check
from src.debugkit.core.services.database.db_connection import DatabaseConnectionService
from src.debugkit.core.services.supabase_clients import create_anon_client
from src.debugkit.runtime.config.config_data import ConfigData
from src.debugkit.runtime.settings import PLACEHOLDER_MARKER

DISPLAY_LIMIT = 20
CONNECTION_TEST_TABLE = "_test_connection"

# 42P01 is Postgres' undefined_table; PGRST205 is PostgREST's schema-cache miss
UNDEFINED_TABLE_CODES = frozenset({"42P01", "PGRST205"})

REQUIRED_VARIABLES = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_DB_PASSWORD",
    "DATABASE_URL",
]


def display_value(value: str) -> str:
    """Truncate long values so secrets are never printed in full."""
    if len(value) > DISPLAY_LIMIT:
        return value[:DISPLAY_LIMIT] + "..."
    return value


def check_environment(config: ConfigData) -> CheckResult:
    values = {
        **config.supabase.environment(),
        **config.database.environment(config.supabase.url),
    }
    details = []
    missing = []
    for key in REQUIRED_VARIABLES:
        value = values.get(key)
        if not value or PLACEHOLDER_MARKER in value:
            missing.append(key)
            details.append(f"{key}: Missing or not configured")
        else:
            details.append(f"{key}: {display_value(value)}")

    return CheckResult(
        name="Environment Variables",
        passed=not missing,
        details=details,
        error=f"Missing or placeholder values: {', '.join(missing)}" if missing else None,
    )


def check_supabase_client(client: Client, table: str = CONNECTION_TEST_TABLE) -> list[str]:
    """Query ``table``; a missing table still proves the API answered."""
    try:
        client.table(table).select("*").limit(1).execute()
    except APIError as e:
        if e.code not in UNDEFINED_TABLE_CODES:
            raise
        return [f"Connected (table {table} does not exist, which is fine)"]
    return ["Connected"]


def check_postgres(service: DatabaseConnectionService) -> list[str]:
    return [f"Server time: {service.server_time()}"]


def run_connection_check(
    config: ConfigData,
    client_factory: Callable[[ConfigData], Client] = lambda c: create_anon_client(c.supabase),
    service_factory: Callable[[ConfigData], DatabaseConnectionService] = DatabaseConnectionService,
) -> CheckReport:
    """Check variables first; stop there if any are missing."""
    report = CheckReport(title="Supabase Connection Test")
    env_result = check_environment(config)
    report.results.append(env_result)
    if not env_result.passed:
        return report

    report.results.append(
        run_check("Supabase Client", lambda: check_supabase_client(client_factory(config)))
    )

    def postgres() -> list[str]:
        service = service_factory(config)
        try:
            return check_postgres(service)
        finally:
            service.dispose()

    report.results.append(run_check("PostgreSQL", postgres))
    return report
