"""FollowService — directed FOLLOWS edges between users.

follow/unfollow are idempotent: repeating them is a silent no-op, and
neither reports an error for an edge that already exists (or is already
gone). Users are matched by username inside each statement.
"""

from __future__ import annotations

from followgraph.domain.user import User
from followgraph.infrastructure.store import queries
from followgraph.infrastructure.store.gateway import ConstraintViolation, StoreError
from followgraph.infrastructure.store.schema import FOLLOWS_CONSTRAINT
from followgraph.services._helpers import now_iso
from followgraph.services.base import BaseService
from followgraph.services.result import ServiceResult
from followgraph.services.telemetry import get_current_span, traced


class FollowService(BaseService):
    """Create and remove follow edges, and partition users around one user."""

    @traced
    async def follow(self, user: User, other: User) -> ServiceResult:
        """Ensure ``user -[FOLLOWS]-> other`` exists."""
        op = "follow"
        try:
            (result,) = await self._store.write(
                queries.create_edge_if_absent(user.username, other.username, now_iso())
            )
            created = result.rowcount > 0
        except ConstraintViolation as exc:
            # A concurrent follow inserted the same edge first.
            if exc.label != FOLLOWS_CONSTRAINT.label:
                return self._store_failure(op, exc)
            created = False
        except StoreError as exc:
            return self._store_failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"source": user.username, "target": other.username, "created": created},
        )

    @traced
    async def unfollow(self, user: User, other: User) -> ServiceResult:
        """Ensure ``user -[FOLLOWS]-> other`` does not exist."""
        op = "unfollow"
        try:
            (result,) = await self._store.write(
                queries.delete_edge_if_present(user.username, other.username)
            )
        except StoreError as exc:
            return self._store_failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "source": user.username,
                "target": other.username,
                "removed": result.rowcount > 0,
            },
        )

    @traced
    async def following_and_others(self, user: User) -> ServiceResult:
        """Split every other user into those *user* follows and the rest.

        One query. *user* never appears in either list, even with a
        self-follow edge. If *user* no longer exists both lists are empty.
        """
        op = "following_and_others"
        try:
            rows = await self._store.fetch(queries.users_with_edge_presence(user.username))
        except StoreError as exc:
            return self._store_failure(op, exc)

        following: list[User] = []
        others: list[User] = []
        for row in rows:
            target = following if row["following"] else others
            target.append(User.from_record(row))

        span = get_current_span()
        if span:
            span.annotate("rows", len(rows))

        return ServiceResult(
            ok=True,
            op=op,
            data={"user": user.username, "following": following, "others": others},
        )
