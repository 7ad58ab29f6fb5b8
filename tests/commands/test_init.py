"""Tests for the init CLI command and the bootstrap it shares with every command."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest
from click.testing import CliRunner

from followgraph.cli import cli
from followgraph.services.schema import SchemaService


def _seed_duplicates(db: Path) -> None:
    """Write a store that already violates username uniqueness."""
    db.parent.mkdir(parents=True)
    with sqlite3.connect(db) as conn:
        conn.execute(
            "CREATE TABLE nodes (id INTEGER PRIMARY KEY, label TEXT NOT NULL, username TEXT,"
            " created TEXT NOT NULL, modified TEXT NOT NULL)"
        )
        conn.executemany(
            "INSERT INTO nodes (label, username, created, modified) VALUES (?, ?, ?, ?)",
            [("User", "dupe", "t", "t"), ("User", "dupe", "t", "t")],
        )
    conn.close()


def _result_json(stream: str) -> dict:
    """The JSON result document, skipping any log lines written before it."""
    start = 0 if stream.startswith("{") else stream.index("\n{") + 1
    return json.loads(stream[start:])


@pytest.mark.usefixtures("_isolated_root")
class TestInitCommand:
    def test_init(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "ensure_constraints" in result.stdout
        assert (tmp_path / ".followgraph" / "graph.db").is_file()

    def test_init_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "init"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["data"]["constraint"] == "uq_nodes_user_username"

    def test_init_twice(self, cli_runner: CliRunner) -> None:
        assert cli_runner.invoke(cli, ["init"]).exit_code == 0
        assert cli_runner.invoke(cli, ["init"]).exit_code == 0

    @pytest.mark.parametrize("args", [["init"], ["user", "list"]])
    def test_constraint_registered_once_per_invocation(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch, args: list[str]
    ) -> None:
        calls: list[SchemaService] = []
        original = SchemaService.ensure_constraints

        async def counting(self: SchemaService):
            calls.append(self)
            return await original(self)

        monkeypatch.setattr(SchemaService, "ensure_constraints", counting)
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert len(calls) == 1

    def test_store_url_from_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        custom = tmp_path / "data" / "social.db"
        (tmp_path / "followgraph.toml").write_text(f'[store]\nurl = "sqlite+aiosqlite:///{custom}"\n')
        result = cli_runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert custom.is_file()
        assert not (tmp_path / ".followgraph").exists()

    def test_subdirectory_uses_project_store(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        assert cli_runner.invoke(cli, ["user", "create", "alice"]).exit_code == 0
        nested = tmp_path / "notes" / "2026"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        result = cli_runner.invoke(cli, ["user", "show", "alice"])
        assert result.exit_code == 0
        assert not (nested / ".followgraph").exists()


@pytest.mark.usefixtures("_isolated_root")
class TestRegistrationFailure:
    def test_init_reports_failure(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _seed_duplicates(tmp_path / ".followgraph" / "graph.db")
        result = cli_runner.invoke(cli, ["--json", "init"])
        assert result.exit_code == 1
        data = _result_json(result.stderr)
        assert data["error"]["code"] == "CONSTRAINT_REGISTRATION_ERROR"

    def test_other_commands_refuse_to_run(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _seed_duplicates(tmp_path / ".followgraph" / "graph.db")
        result = cli_runner.invoke(cli, ["user", "create", "fresh"])
        assert result.exit_code == 1
        assert "ensure_constraints" in result.stderr
        assert result.stdout == ""
