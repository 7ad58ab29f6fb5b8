"""Tests for follow, unfollow, and following commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from followgraph.cli import cli


@pytest.fixture
def seeded(cli_runner: CliRunner, _isolated_root: None) -> CliRunner:
    for name in ("alice", "bob", "carol"):
        assert cli_runner.invoke(cli, ["user", "create", name]).exit_code == 0
    return cli_runner


def _json_ok(runner: CliRunner, *args: str) -> dict:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.stderr
    return json.loads(result.stdout)


class TestFollowCommands:
    def test_follow(self, seeded: CliRunner) -> None:
        data = _json_ok(seeded, "follow", "alice", "bob")
        assert data["op"] == "follow"
        assert data["data"] == {"source": "alice", "target": "bob", "created": True}

    def test_follow_twice(self, seeded: CliRunner) -> None:
        seeded.invoke(cli, ["follow", "alice", "bob"])
        data = _json_ok(seeded, "follow", "alice", "bob")
        assert data["data"]["created"] is False

    def test_follow_unknown_user(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, ["follow", "alice", "ghost"])
        assert result.exit_code == 1
        assert "ghost" in result.stderr

    def test_unfollow(self, seeded: CliRunner) -> None:
        seeded.invoke(cli, ["follow", "alice", "bob"])
        data = _json_ok(seeded, "unfollow", "alice", "bob")
        assert data["data"]["removed"] is True
        again = _json_ok(seeded, "unfollow", "alice", "bob")
        assert again["data"]["removed"] is False


class TestFollowingCommand:
    def test_partition_json(self, seeded: CliRunner) -> None:
        seeded.invoke(cli, ["follow", "alice", "bob"])
        data = _json_ok(seeded, "following", "alice")
        assert data["op"] == "following_and_others"
        assert [u["username"] for u in data["data"]["following"]] == ["bob"]
        assert [u["username"] for u in data["data"]["others"]] == ["carol"]

    def test_partition_rich(self, seeded: CliRunner) -> None:
        seeded.invoke(cli, ["follow", "alice", "carol"])
        result = seeded.invoke(cli, ["following", "alice"])
        assert result.exit_code == 0
        assert "following (1): carol" in result.stdout
        assert "others (1): bob" in result.stdout

    def test_partition_quiet(self, seeded: CliRunner) -> None:
        seeded.invoke(cli, ["follow", "alice", "bob"])
        seeded.invoke(cli, ["follow", "alice", "carol"])
        result = seeded.invoke(cli, ["-q", "following", "alice"])
        assert sorted(result.stdout.split()) == ["bob", "carol"]

    def test_partition_unknown_user(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, ["following", "ghost"])
        assert result.exit_code == 1

    def test_verbose_includes_telemetry(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, ["-v", "--json", "following", "alice"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert "FollowService.following_and_others" in data["meta"]["telemetry"]["name"]
