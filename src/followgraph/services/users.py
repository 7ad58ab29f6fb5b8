"""UserService — CRUD over User nodes.

Pipeline per write: VALIDATE → STORE → PROJECT → RESPOND

Username uniqueness is never checked client-side. The store's unique
index is the only arbiter; a violation reported by the gateway becomes
a ``VALIDATION_ERROR`` naming the attempted username. This is what makes
concurrent creates with the same username safe.
"""

from __future__ import annotations

from typing import Any

from followgraph.domain.user import User, project_users
from followgraph.domain.validation import USER_SCHEMA, ValidationMode, validate_props
from followgraph.infrastructure.store import queries
from followgraph.infrastructure.store.gateway import ConstraintViolation, StoreError
from followgraph.infrastructure.store.schema import USERNAME_CONSTRAINT
from followgraph.services._helpers import now_iso, username_taken_message
from followgraph.services.base import BaseService
from followgraph.services.result import USERNAME_TAKEN, ErrorCode, ServiceResult
from followgraph.services.telemetry import trace_span, traced


def _is_username_violation(exc: ConstraintViolation) -> bool:
    return exc.label == USERNAME_CONSTRAINT.label and exc.property == USERNAME_CONSTRAINT.property


def _username_taken(op: str, username: str, warnings: list[str]) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.VALIDATION_ERROR,
        username_taken_message(username),
        detail={"field": "username", "reason": USERNAME_TAKEN, "username": username},
        warnings=warnings,
    )


class UserService(BaseService):
    """Create, read, patch, and delete users."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @traced
    async def create(self, props: dict[str, Any]) -> ServiceResult:
        """Create a user from *props* (every required field must be present)."""
        op = "create_user"

        # ── VALIDATE ─────────────────────────────────────────
        vr = validate_props(props, USER_SCHEMA, ValidationMode.FULL)
        if not vr.valid:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                "; ".join(vr.errors),
                detail={"field": vr.field},
                warnings=vr.warnings,
            )

        # ── STORE ────────────────────────────────────────────
        try:
            with trace_span("insert_user"):
                (result,) = await self._store.write(queries.create_user(vr.sanitized, now_iso()))
        except ConstraintViolation as exc:
            if _is_username_violation(exc):
                return _username_taken(op, vr.sanitized["username"], vr.warnings)
            return self._store_failure(op, exc)
        except StoreError as exc:
            return self._store_failure(op, exc)

        # ── RESPOND ──────────────────────────────────────────
        user = User.from_record(result.rows[0])
        return ServiceResult(ok=True, op=op, data={"user": user}, warnings=vr.warnings)

    @traced
    async def patch(self, user: User, props: dict[str, Any]) -> ServiceResult:
        """Merge the valid fields of *props* onto *user*'s stored record.

        Fields not submitted are left as they are in the store. On success
        ``data["user"]`` is the refreshed snapshot; the passed-in handle is
        unchanged.
        """
        op = "patch_user"

        vr = validate_props(props, USER_SCHEMA, ValidationMode.PARTIAL)
        if not vr.valid:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                "; ".join(vr.errors),
                detail={"field": vr.field},
                warnings=vr.warnings,
            )

        changes = vr.sanitized
        try:
            with trace_span("merge_user"):
                (result,) = await self._store.write(
                    queries.patch_user(user.username, changes, now_iso())
                )
        except ConstraintViolation as exc:
            if _is_username_violation(exc):
                return _username_taken(op, changes.get("username", user.username), vr.warnings)
            return self._store_failure(op, exc)
        except StoreError as exc:
            return self._store_failure(op, exc)

        if not result.rows:
            return ServiceResult.failure(
                op,
                ErrorCode.DELETED,
                f"User ‘{user.username}’ was deleted before the update landed.",
                detail={"username": user.username},
                warnings=vr.warnings,
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"user": User.from_record(result.rows[0]), "fields_changed": sorted(changes)},
            warnings=vr.warnings,
        )

    @traced
    async def delete(self, user: User) -> ServiceResult:
        """Delete *user* and every follow edge touching it, in one transaction."""
        op = "delete_user"
        try:
            edges_result, node_result = await self._store.write(
                *queries.delete_user_and_edges(user.username)
            )
        except StoreError as exc:
            return self._store_failure(op, exc)

        if node_result.rowcount == 0:
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_FOUND,
                f"No user found with username: {user.username}",
                detail={"username": user.username},
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"username": user.username, "edges_removed": edges_result.rowcount},
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @traced
    async def get(self, username: str) -> ServiceResult:
        op = "get_user"
        try:
            rows = await self._store.fetch(queries.get_user(username))
        except StoreError as exc:
            return self._store_failure(op, exc)

        if not rows:
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_FOUND,
                f"No user found with username: {username}",
                detail={"username": username},
            )
        return ServiceResult(ok=True, op=op, data={"user": User.from_record(rows[0])})

    @traced
    async def get_all(self) -> ServiceResult:
        """List every user. Ordering is unspecified."""
        op = "list_users"
        try:
            rows = await self._store.fetch(queries.get_all_users())
        except StoreError as exc:
            return self._store_failure(op, exc)

        users = project_users(rows)
        return ServiceResult(ok=True, op=op, data={"users": users, "count": len(users)})
