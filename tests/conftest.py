"""Shared pytest fixtures for the pg_onboard test suite."""

import pytest

from mocks import MockConnection

from pg_onboard import config as config_module
from pg_onboard.runner.handle import DatabaseHandle


ENV_VARS = [
    "PGHOST",
    "PGPORT",
    "PGUSER",
    "PGPASSWORD",
    "PGDATABASE",
    "PGSSLMODE",
    "PG_ONBOARD_MONITOR_USER",
    "PG_ONBOARD_MONITOR_PASSWORD",
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """No config file or libpq environment leaks into a test."""
    monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [])
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_conn() -> MockConnection:
    return MockConnection()


@pytest.fixture
def handle(mock_conn: MockConnection) -> DatabaseHandle:
    return DatabaseHandle(mock_conn)
