"""Command: prepare the store (tables + username uniqueness constraint)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from followgraph.commands._base import FgCommand

if TYPE_CHECKING:
    from followgraph.commands._context import AppContext


@click.command("init", cls=FgCommand)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the store tables and register the username constraint."""
    app.run()
