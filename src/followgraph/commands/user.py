"""Command group: create, show, list, rename, and delete users."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from followgraph.commands._base import FgGroup
from followgraph.services.users import UserService

if TYPE_CHECKING:
    from followgraph.commands._context import AppContext
    from followgraph.infrastructure.store.gateway import GraphStore
    from followgraph.services.result import ServiceResult


@click.group(cls=FgGroup)
@click.pass_obj
def user(app: AppContext) -> None:
    """Manage user records."""


@user.command()
@click.argument("username")
@click.pass_obj
def create(app: AppContext, username: str) -> None:
    """Create a user."""

    async def _create(store: GraphStore) -> ServiceResult:
        return await UserService(store).create({"username": username})

    app.run(_create)


@user.command()
@click.argument("username")
@click.pass_obj
def show(app: AppContext, username: str) -> None:
    """Show one user."""

    async def _show(store: GraphStore) -> ServiceResult:
        return await UserService(store).get(username)

    app.run(_show)


@user.command(name="list")
@click.pass_obj
def list_users(app: AppContext) -> None:
    """List all users (in no particular order)."""

    async def _list(store: GraphStore) -> ServiceResult:
        return await UserService(store).get_all()

    app.run(_list)


@user.command()
@click.argument("username")
@click.argument("new_username")
@click.pass_obj
def rename(app: AppContext, username: str, new_username: str) -> None:
    """Change a user's username."""

    async def _rename(store: GraphStore) -> ServiceResult:
        users = UserService(store)
        found = await users.get(username)
        if not found.ok:
            return found
        return await users.patch(found.data["user"], {"username": new_username})

    app.run(_rename)


@user.command()
@click.argument("username")
@click.pass_obj
def delete(app: AppContext, username: str) -> None:
    """Delete a user and all of its follow relationships."""

    async def _delete(store: GraphStore) -> ServiceResult:
        users = UserService(store)
        found = await users.get(username)
        if not found.ok:
            return found
        return await users.delete(found.data["user"])

    app.run(_delete)
