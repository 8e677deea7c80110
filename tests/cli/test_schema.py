"""Tests for the schema and prompt commands."""

import json

import pytest

from sqlai.cli.main import app
from sqlai.core.exceptions import InputError
from tests.fakes import CatalogClient
from tests.integration_config import PROFILE_ARGS, TEST_SCHEMA

COLUMN_ROWS = [
    ("users", "id", "bigint", None),
    ("users", "email", "character varying", 120),
]
KEY_ROWS = [("users", "id", "PRIMARY KEY", None, None)]


@pytest.fixture
def catalog(monkeypatch):
    def install(*results, module="schema"):
        client = CatalogClient(*results)
        monkeypatch.setattr(
            f"sqlai.cli.commands.{module}.get_client", lambda resolved: client
        )
        return client

    return install


@pytest.mark.unit
class TestSchemaCommand:
    def test_text_output(self, runner, catalog):
        catalog(COLUMN_ROWS, KEY_ROWS)
        result = runner.invoke(app, ["--table", "schema"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "Table: users",
            "  Columns:",
            "    - id: bigint (Primary Key)",
            "    - email: character varying(120)",
        ]

    def test_default_schema_used(self, runner, catalog):
        client = catalog(COLUMN_ROWS, KEY_ROWS)
        runner.invoke(app, ["--table", "schema"])
        assert client.queries[0][1] == {"schema": "public"}

    def test_schema_option(self, runner, catalog):
        client = catalog(COLUMN_ROWS, KEY_ROWS)
        runner.invoke(app, ["--table", "schema", "--schema", "sales"])
        assert client.queries[0][1] == {"schema": "sales"}

    def test_global_schema_option(self, runner, catalog):
        client = catalog(COLUMN_ROWS, KEY_ROWS)
        runner.invoke(app, ["--schema", "audit", "--table", "schema"])
        assert client.queries[0][1] == {"schema": "audit"}

    def test_json_output(self, runner, catalog):
        catalog(COLUMN_ROWS, KEY_ROWS)
        result = runner.invoke(app, ["--format", "json", "schema"])
        data = json.loads(result.stdout)
        assert data["schema_name"] == "public"
        assert data["tables"][0]["columns"][0] == {
            "name": "id",
            "data_type": "bigint",
            "is_primary_key": True,
            "foreign_key": None,
        }

    def test_empty_schema(self, runner, catalog):
        catalog([], [])
        result = runner.invoke(app, ["--table", "schema", "-s", "empty"])
        assert result.exit_code == 0
        assert "No tables found in schema 'empty'" in result.output


@pytest.mark.unit
class TestPromptCommand:
    def test_prompt_contains_question_and_schema(self, runner, catalog):
        catalog(COLUMN_ROWS, KEY_ROWS, module="schema")
        result = runner.invoke(app, ["--max-rows", "50", "prompt", "How many users?"])
        assert result.exit_code == 0, result.output
        assert "How many users?" in result.stdout
        assert "Table: users" in result.stdout
        assert "LIMIT 50" in result.stdout

    def test_database_type(self, runner, catalog):
        catalog(COLUMN_ROWS, KEY_ROWS)
        result = runner.invoke(app, ["prompt", "q", "--database-type", "MySQL"])
        assert "Write one MySQL SELECT statement" in result.stdout

    def test_blank_question(self, runner, catalog):
        catalog(COLUMN_ROWS, KEY_ROWS)
        result = runner.invoke(app, ["prompt", "  "])
        assert isinstance(result.exception, InputError)


@pytest.mark.integration
def test_schema_live(runner):
    result = runner.invoke(app, [*PROFILE_ARGS, "--format", "json", "schema", "-s", TEST_SCHEMA])
    assert result.exit_code == 0, result.output
    if result.stdout.strip():
        assert json.loads(result.stdout)["schema_name"] == TEST_SCHEMA
