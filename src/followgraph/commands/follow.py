"""Commands: follow, unfollow, and the following/others view."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from followgraph.commands._base import FgCommand
from followgraph.services.follows import FollowService
from followgraph.services.users import UserService

if TYPE_CHECKING:
    from followgraph.commands._context import AppContext
    from followgraph.domain.user import User
    from followgraph.infrastructure.store.gateway import GraphStore
    from followgraph.services.result import ServiceResult


async def _resolve_pair(
    store: GraphStore, username: str, other: str
) -> tuple[User, User] | ServiceResult:
    """Fetch both users, or return the first failed lookup."""
    users = UserService(store)
    first = await users.get(username)
    if not first.ok:
        return first
    second = await users.get(other)
    if not second.ok:
        return second
    return first.data["user"], second.data["user"]


@click.command(cls=FgCommand)
@click.argument("username")
@click.argument("other")
@click.pass_obj
def follow(app: AppContext, username: str, other: str) -> None:
    """Make USERNAME follow OTHER (no-op if already following)."""

    async def _follow(store: GraphStore) -> ServiceResult:
        pair = await _resolve_pair(store, username, other)
        if not isinstance(pair, tuple):
            return pair
        return await FollowService(store).follow(*pair)

    app.run(_follow)


@click.command(cls=FgCommand)
@click.argument("username")
@click.argument("other")
@click.pass_obj
def unfollow(app: AppContext, username: str, other: str) -> None:
    """Make USERNAME stop following OTHER (no-op if not following)."""

    async def _unfollow(store: GraphStore) -> ServiceResult:
        pair = await _resolve_pair(store, username, other)
        if not isinstance(pair, tuple):
            return pair
        return await FollowService(store).unfollow(*pair)

    app.run(_unfollow)


@click.command(cls=FgCommand)
@click.argument("username")
@click.pass_obj
def following(app: AppContext, username: str) -> None:
    """Show who USERNAME follows, and everyone else."""

    async def _partition(store: GraphStore) -> ServiceResult:
        found = await UserService(store).get(username)
        if not found.ok:
            return found
        return await FollowService(store).following_and_others(found.data["user"])

    app.run(_partition)
