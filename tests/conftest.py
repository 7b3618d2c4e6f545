"""Shared fixtures for the debugkit test suite."""

from collections.abc import Generator

import pytest
from sqlalchemy import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.debugkit.core.services.database.db_connection import DatabaseConnectionService
from src.debugkit.runtime import context as context_module
from src.debugkit.runtime.config.config_data import (
    ConfigData,
    DatabaseConfig,
    MigrationConfig,
    SupabaseConfig,
    TestingConfig,
)


@pytest.fixture(autouse=True)
def isolated_context() -> Generator[None, None, None]:
    """Every test starts without a loaded application context."""
    token = context_module._app_context.set(None)
    yield
    context_module._app_context.reset(token)


@pytest.fixture
def supabase_config() -> SupabaseConfig:
    return SupabaseConfig(
        url="https://abcdefghijklmnop.supabase.co",
        anon_key="anon-key-0123456789abcdefghij",
        service_role_key="service-role-key-0123456789abcdefghij",
    )


@pytest.fixture
def sqlite_config(tmp_path, supabase_config) -> ConfigData:
    """Configuration pointing at SQLite with test agents under ``tmp_path``."""
    return ConfigData(
        database=DatabaseConfig(url="sqlite://", password="db-password"),
        supabase=supabase_config,
        testing=TestingConfig(
            agents_dir=str(tmp_path / "agents"),
            timing_file=str(tmp_path / "timing" / "start.txt"),
            parallel_limit=2,
        ),
        migrations=MigrationConfig(
            directory=str(tmp_path / "migrations"), grace_period_seconds=0.0
        ),
    )


@pytest.fixture
def sqlite_engine():
    """Shared in-memory SQLite engine with the SQLModel tables created."""
    # Imported for its side effect of registering the products table
    from src.debugkit.entities.product import ProductTable  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def empty_engine():
    """Shared in-memory SQLite engine with no tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db_service(sqlite_config, sqlite_engine) -> DatabaseConnectionService:
    return DatabaseConnectionService(sqlite_config, engine=sqlite_engine)


@pytest.fixture
def session(sqlite_engine) -> Generator[Session, None, None]:
    with Session(sqlite_engine) as session:
        yield session
