"""Click base classes carrying followgraph's ``--examples`` flag.

Every :class:`FgCommand` and :class:`FgGroup` gets an eager ``--examples``
flag that prints the entry for its command path from
:data:`COMMAND_EXAMPLES` and exits, keeping ``--help`` short. Examples
live here in one table so every registered command can be checked
against it.
"""

from __future__ import annotations

from typing import Any

import click

# Keyed by command path below the root group ("user create", "follow").
COMMAND_EXAMPLES: dict[str, tuple[str, ...]] = {
    "init": (
        "followgraph init",
        "followgraph --json init",
        "FOLLOWGRAPH_STORE__URL=postgresql+asyncpg://localhost/social followgraph init",
    ),
    "user": (
        "followgraph user create alice",
        "followgraph user show alice",
        "followgraph user list",
        "followgraph user rename alice alice2",
        "followgraph user delete alice2",
    ),
    "user create": (
        "followgraph user create alice",
        "followgraph --json user create bob_99",
    ),
    "user show": (
        "followgraph user show alice",
        "followgraph --json user show alice",
    ),
    "user list": (
        "followgraph user list",
        "followgraph -q user list",
    ),
    "user rename": ("followgraph user rename alice alice2",),
    "user delete": ("followgraph user delete alice",),
    "follow": (
        "followgraph follow alice bob",
        "followgraph --json follow alice bob",
    ),
    "unfollow": ("followgraph unfollow alice bob",),
    "following": (
        "followgraph following alice",
        "followgraph --json following alice",
        "followgraph -q following alice",
    ),
}


def command_key(ctx: click.Context) -> str:
    """Command path of *ctx* without the program name, e.g. ``"user rename"``."""
    names: list[str] = []
    while ctx.parent is not None:
        names.append(ctx.info_name or "")
        ctx = ctx.parent
    return " ".join(reversed(names))


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    lines = COMMAND_EXAMPLES.get(command_key(ctx))
    if not lines:
        click.echo(f"No examples for '{ctx.command_path}'.")
    else:
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo("\n".join(f"  {line}" for line in lines))
    ctx.exit(0)


def _examples_option() -> click.Option:
    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_show_examples,
        help="Show usage examples.",
    )


class FgCommand(click.Command):
    """Click Command with the ``--examples`` flag."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params.append(_examples_option())


class FgGroup(click.Group):
    """Click Group with the ``--examples`` flag.

    ``command_class = FgCommand`` gives every subcommand the flag too.
    """

    command_class = FgCommand

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params.append(_examples_option())
