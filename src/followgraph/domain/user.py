"""User projection — raw store records to immutable User snapshots.

A :class:`User` is a read-only view of one store record at the time it
was read. Nothing on it can be assigned; changes go through
``UserService.patch``, which returns a fresh snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

# Store properties exposed on the projection. Everything else on a raw
# record (row id, label) stays inside the store layer.
USER_PROPERTIES: tuple[str, ...] = ("username", "created", "modified")


class User(BaseModel):
    """Snapshot of a stored user."""

    model_config = {"frozen": True}

    username: str
    created: str | None = None
    modified: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> User:
        """Project a raw store row, keeping only whitelisted properties."""
        return cls(**{key: record[key] for key in USER_PROPERTIES if key in record})

    def __str__(self) -> str:
        return self.username


def project_users(records: Iterable[Mapping[str, Any]]) -> list[User]:
    """Project a sequence of raw store rows."""
    return [User.from_record(record) for record in records]
