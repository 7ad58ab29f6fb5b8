"""GraphStore — the single gateway between services and the store.

Every public coroutine is one store request: a read on a plain
connection, or a write inside one ``engine.begin()`` transaction that
commits on success and rolls back on any failure. Several statements
passed to :meth:`GraphStore.write` land atomically or not at all.

Driver failures never leave this module raw. They are translated into:

- :class:`ConstraintViolation` — a uniqueness rule from
  :data:`~followgraph.infrastructure.store.schema.UNIQUE_CONSTRAINTS` was
  violated; tagged with the rule's label and property.
- :class:`StoreError` — anything else (transport, timeout, syntax, or a
  constraint violation that cannot be attributed).

Nothing is retried here. An optional observer is told the name and
duration of every request, successful or not.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from followgraph.infrastructure.store.schema import find_constraint, metadata

if TYPE_CHECKING:
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.ext.asyncio import AsyncEngine
    from sqlalchemy.sql import Executable

logger = logging.getLogger(__name__)

# Called with (request name, elapsed milliseconds) after every request.
RequestObserver = Callable[[str, float], None]


class StoreError(Exception):
    """Failure talking to the store."""


class ConstraintViolation(StoreError):
    """A store-enforced uniqueness constraint rejected a write."""

    def __init__(self, label: str, property: str, message: str) -> None:
        super().__init__(message)
        self.label = label
        self.property = property


@dataclass(frozen=True)
class StatementResult:
    """Rows (as dicts) and affected row count for one executed statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0


def _collect(result: CursorResult[Any]) -> StatementResult:
    rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
    rowcount = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else 0
    return StatementResult(rows=rows, rowcount=rowcount)


class GraphStore:
    """Executes statements against the store and normalizes its errors."""

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        request_timeout: float | None = None,
        observer: RequestObserver | None = None,
    ) -> None:
        self._engine = engine
        self._request_timeout = request_timeout
        self._observer = observer

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def _request(self, op: str) -> AsyncIterator[None]:
        """Apply the request timeout, translate driver errors, notify the observer."""
        started = time.perf_counter()
        try:
            async with asyncio.timeout(self._request_timeout):
                yield
        except IntegrityError as exc:
            message = str(exc.orig)
            spec = find_constraint(message)
            if spec is None:
                logger.warning("Unattributed constraint violation during %s: %s", op, message)
                raise StoreError(f"Constraint violation: {message}") from exc
            raise ConstraintViolation(spec.label, spec.property, message) from exc
        except TimeoutError as exc:
            logger.warning("Store request %s timed out after %ss", op, self._request_timeout)
            msg = f"Store request timed out after {self._request_timeout}s"
            raise StoreError(msg) from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Store request %s failed: %s", op, exc)
            raise StoreError(str(exc)) from exc
        finally:
            if self._observer is not None:
                self._observer(op, (time.perf_counter() - started) * 1000)

    async def fetch(self, stmt: Executable) -> list[dict[str, Any]]:
        """Run a read-only statement and return its rows."""
        async with self._request("fetch"):
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                return _collect(result).rows

    async def write(self, *statements: Executable) -> list[StatementResult]:
        """Run *statements* in one transaction, returning one result per statement."""
        results: list[StatementResult] = []
        async with self._request("write"):
            async with self._engine.begin() as conn:
                for stmt in statements:
                    results.append(_collect(await conn.execute(stmt)))
        return results

    async def create_tables(self) -> None:
        """Create the ``nodes`` and ``edges`` tables if they do not exist."""
        async with self._request("create_tables"):
            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)

    async def execute_ddl(self, ddl: str) -> None:
        """Run a raw DDL statement in its own transaction."""
        async with self._request("execute_ddl"):
            async with self._engine.begin() as conn:
                await conn.execute(text(ddl))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self._engine.dispose()
