"""Tests for async engine creation."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text

from followgraph.infrastructure.store.engine import (
    STORE_DIRNAME,
    STORE_FILENAME,
    create_store_engine,
    default_store_url,
)

pytestmark = pytest.mark.anyio


class TestDefaultStoreUrl:
    async def test_points_under_root(self, tmp_path: Path) -> None:
        url = default_store_url(tmp_path)
        assert url.startswith("sqlite+aiosqlite:///")
        assert url.endswith(f"{STORE_DIRNAME}/{STORE_FILENAME}")


class TestCreateStoreEngine:
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        engine = create_store_engine(default_store_url(tmp_path))
        try:
            assert (tmp_path / STORE_DIRNAME).is_dir()
        finally:
            await engine.dispose()

    async def test_sqlite_pragmas(self, tmp_path: Path) -> None:
        engine = create_store_engine(default_store_url(tmp_path))
        try:
            async with engine.connect() as conn:
                fk = (await conn.execute(text("PRAGMA foreign_keys"))).scalar()
                mode = (await conn.execute(text("PRAGMA journal_mode"))).scalar()
            assert fk == 1
            assert mode == "wal"
        finally:
            await engine.dispose()

    async def test_memory_url_creates_nothing(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        engine = create_store_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert list(tmp_path.iterdir()) == []
        finally:
            await engine.dispose()
