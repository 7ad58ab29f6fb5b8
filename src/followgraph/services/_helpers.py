"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (record timestamps)."""
    return datetime.now(UTC).isoformat()


def username_taken_message(username: str) -> str:
    return f"The username ‘{username}’ is taken."
