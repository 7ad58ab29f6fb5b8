"""Shared pytest fixtures and test helpers for followgraph tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from followgraph.domain.user import User
from followgraph.infrastructure.store.engine import create_store_engine, default_store_url
from followgraph.infrastructure.store.gateway import GraphStore
from followgraph.services.schema import SchemaService
from followgraph.services.telemetry import disable_telemetry


@pytest.fixture
def anyio_backend() -> str:
    """aiosqlite needs asyncio."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """``--verbose`` CLI runs switch telemetry on in the calling context."""
    yield
    disable_telemetry()


@pytest.fixture(autouse=True)
def _reset_log_context() -> Iterator[None]:
    """CLI runs bind the store they talk to into the structlog context."""
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def store_url(tmp_path: Path) -> str:
    """SQLite store URL inside the test's temp directory."""
    return default_store_url(tmp_path)


@pytest.fixture
async def bare_store(store_url: str) -> AsyncIterator[GraphStore]:
    """Gateway over an empty database: no tables, no constraint."""
    store = GraphStore(create_store_engine(store_url))
    try:
        yield store
    finally:
        await store.dispose()


@pytest.fixture
async def store(bare_store: GraphStore) -> GraphStore:
    """Gateway over a prepared database (tables + username constraint)."""
    result = await SchemaService(bare_store).ensure_constraints()
    assert result.ok, result.error
    return bare_store


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.delenv("FOLLOWGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("FOLLOWGRAPH_STORE__URL", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


async def create_user(store: GraphStore, username: str) -> User:
    """Create a user via UserService, asserting success."""
    from followgraph.services.users import UserService

    result = await UserService(store).create({"username": username})
    assert result.ok, result.error
    return result.data["user"]


async def partition(store: GraphStore, user: User) -> tuple[list[str], list[str]]:
    """Usernames in ``user``'s following and others lists, sorted."""
    from followgraph.services.follows import FollowService

    result = await FollowService(store).following_and_others(user)
    assert result.ok, result.error
    following = sorted(u.username for u in result.data["following"])
    others = sorted(u.username for u in result.data["others"])
    return following, others
