"""Supabase client construction shared by every command and check."""

from dataclasses import dataclass

from loguru import logger
from supabase import Client, create_client

from src.debugkit.core.errors import ConfigurationError
from src.debugkit.runtime.config.config_data import SupabaseConfig
from src.debugkit.runtime.settings import find_missing

REQUIRED_VARIABLES = ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY"]
REQUIRED_TEST_VARIABLES = [
    "SUPABASE_TEST_URL",
    "SUPABASE_TEST_SERVICE_ROLE_KEY",
    "SUPABASE_TEST_ANON_KEY",
]


@dataclass
class SupabaseClients:
    """An admin (service role) client and an optional anonymous client."""

    admin: Client
    anon: Client | None = None


def create_admin_client(config: SupabaseConfig) -> Client:
    """Create a client with service role privileges."""
    if not config.url or not config.service_role_key:
        raise ConfigurationError(
            "Missing required Supabase admin environment variables: "
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY",
            missing=["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"],
        )
    return create_client(config.url, config.service_role_key)


def create_anon_client(config: SupabaseConfig) -> Client:
    """Create a client with anonymous (public) privileges."""
    if not config.url or not config.anon_key:
        raise ConfigurationError(
            "Missing required Supabase anonymous environment variables: "
            "SUPABASE_URL and SUPABASE_ANON_KEY",
            missing=["SUPABASE_URL", "SUPABASE_ANON_KEY"],
        )
    return create_client(config.url, config.anon_key)


def create_test_clients(config: SupabaseConfig) -> SupabaseClients:
    """Create both clients from the SUPABASE_TEST_* values, falling back per key."""
    url = config.resolved_test_url
    service_key = config.resolved_test_service_role_key
    anon_key = config.resolved_test_anon_key

    if not url or not service_key or not anon_key:
        raise ConfigurationError("Missing required Supabase test environment variables")

    return SupabaseClients(
        admin=create_client(url, service_key),
        anon=create_client(url, anon_key),
    )


def validate_supabase_environment(
    config: SupabaseConfig, include_test: bool = False
) -> list[str]:
    """Return the names of required Supabase variables that are missing."""
    required = list(REQUIRED_VARIABLES)
    if include_test:
        required.extend(REQUIRED_TEST_VARIABLES)
    return find_missing(config.environment(), required)


def create_validated_clients(
    config: SupabaseConfig, include_anon: bool = True, is_test: bool = False
) -> SupabaseClients:
    """Validate the environment, then build the requested clients."""
    missing = validate_supabase_environment(config, include_test=is_test)
    if missing:
        raise ConfigurationError(
            f"Missing required Supabase environment variables: {', '.join(missing)}",
            missing=missing,
        )

    if is_test:
        return create_test_clients(config)

    logger.debug("Creating Supabase clients for {}", config.url)
    clients = SupabaseClients(admin=create_admin_client(config))
    if include_anon:
        clients.anon = create_anon_client(config)
    return clients
