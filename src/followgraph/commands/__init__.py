"""Subcommand modules for followgraph.

Provides register_commands() which uses deferred imports to keep
``followgraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``user`` group and the standalone commands on the root group."""
    # --- Groups ---
    from followgraph.commands.user import user

    cli.add_command(user)

    # --- Standalone commands ---
    from followgraph.commands.follow import follow, following, unfollow
    from followgraph.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
    cli.add_command(follow)
    cli.add_command(unfollow)
    cli.add_command(following)
