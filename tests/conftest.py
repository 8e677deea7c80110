"""Shared test fixtures for SQL AI Tool."""

import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from sqlai.cli.main import app
from sqlai.core.config import ExecutionPolicy
from tests.fakes import FakeClient, FakeCursor


def pytest_collection_modifyitems(config, items):
    if os.environ.get("SQLAI_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set SQLAI_INTEGRATION=1 to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user config, PG* variables and history out of tests."""
    for var in (
        "PGHOST",
        "PGPORT",
        "PGDATABASE",
        "PGUSER",
        "PGPASSWORD",
        "SQLAI_PROFILE",
        "SQLAI_MAX_ROW_LIMIT",
        "SQLAI_QUERY_TIMEOUT_SECONDS",
        "SQLAI_MAX_EXECUTION_TIME_MS",
        "SENTRY_DSN",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "sqlai.core.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.toml"
    )
    monkeypatch.setattr(
        "sqlai.core.config.DEFAULT_HISTORY_PATH", tmp_path / "history.jsonl"
    )


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def policy():
    return ExecutionPolicy()


@pytest.fixture
def users_cursor():
    return FakeCursor(
        columns=[("id", 20), ("name", 1043)],
        rows=[(1, "alice"), (2, "bob")],
    )


@pytest.fixture
def users_client(users_cursor):
    return FakeClient(users_cursor)
