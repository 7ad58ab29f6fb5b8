"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console backed by a StringIO buffer, so
:func:`render_result` can return plain strings. Rich drops colour codes
when output is not a terminal (tests, pipes).

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.padding import Padding
from rich.table import Table
from rich.text import Text
from rich.theme import Theme
from rich.tree import Tree

from followgraph.domain.user import User

if TYPE_CHECKING:
    from followgraph.services.result import ServiceResult

FOLLOWGRAPH_THEME = Theme(
    {
        "fg.ok": "bold green",
        "fg.error": "bold red",
        "fg.warning": "bold yellow",
        "fg.op": "bold cyan",
        "fg.key": "dim",
        "fg.username": "bold blue",
        "fg.following": "green",
        "fg.other": "dim",
        "fg.store": "magenta",
    }
)

CONSOLE_WIDTH = 120


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    buffer = StringIO()
    console = Console(file=buffer, theme=FOLLOWGRAPH_THEME, highlight=False, width=CONSOLE_WIDTH)

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return buffer.getvalue().rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    users = result.data.get("users")
    if isinstance(users, list):
        return "\n".join(_username(u) for u in users)
    if "following" in result.data:
        return "\n".join(_username(u) for u in result.data["following"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _username(item: Any) -> str:
    if isinstance(item, User):
        return item.username
    if isinstance(item, dict):
        return str(item.get("username", ""))
    return str(item)


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="fg.ok")
    op = Text(f"  {result.op}", style="fg.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}:", style="fg.key")
    style = "fg.username" if key in ("username", "source", "target", "user") else ""
    console.print(k, Text(str(value), style=style), end="")
    console.print()


def _span_label(span: dict[str, Any]) -> Text:
    label = Text(str(span.get("name", "?")), style="fg.op")
    label.append(f" {span.get('duration_ms', 0)}ms", style="dim")
    store = span.get("store")
    if store:
        label.append(f"  store: {store['requests']} req, {store['ms']}ms", style="fg.store")
    for key, value in span.get("annotations", {}).items():
        label.append(f"  {key}={value}", style="dim")
    return label


def _span_tree(span: dict[str, Any], parent: Tree | None = None) -> Tree:
    """Build a Rich tree from a serialized telemetry span."""
    node = Tree(_span_label(span)) if parent is None else parent.add(_span_label(span))
    for child in span.get("children", []):
        _span_tree(child, node)
    return node


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block (verbose only). Telemetry is drawn as a span tree."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(Text(f"    {k}:"))
        if k == "telemetry" and isinstance(v, dict):
            console.print(Padding(_span_tree(v), (0, 0, 0, 6)))
        else:
            console.print(Text(f"      {v}"))


def _user_table(users: list[User], *, title: str | None = None) -> Table:
    table = Table(title=title, show_edge=False, pad_edge=False)
    table.add_column("Username", style="fg.username")
    table.add_column("Created", style="dim")
    table.add_column("Modified", style="dim")
    for user in users:
        table.add_row(user.username, user.created or "", user.modified or "")
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="fg.error")
    op = Text(f"  {result.op}", style="fg.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Renderers ─────────────────────────────────────────────────────────


def _render_user(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/get/patch results: the user snapshot."""
    _status_line(console, result)
    user: User = result.data["user"]
    _field(console, "username", user.username)
    if user.created:
        _field(console, "created", user.created)
    if user.modified:
        _field(console, "modified", user.modified)
    if "fields_changed" in result.data:
        _field(console, "fields_changed", ", ".join(result.data["fields_changed"]) or "-")
    if verbose:
        _render_meta(console, result)


def _render_user_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    users: list[User] = result.data.get("users", [])
    console.print(_user_table(users))
    console.print(f"\n{result.data.get('count', len(users))} users")
    if verbose:
        _render_meta(console, result)


def _render_partition(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the following/others split for one user."""
    _status_line(console, result)
    _field(console, "user", result.data.get("user", ""))
    for key, style in (("following", "fg.following"), ("others", "fg.other")):
        users: list[User] = result.data.get(key, [])
        names = Text(", ".join(u.username for u in users) or "-", style=style)
        console.print(Text(f"  {key} ({len(users)}):", style="fg.key"), names, end="")
        console.print()
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "create_user": _render_user,
    "get_user": _render_user,
    "patch_user": _render_user,
    "list_users": _render_user_list,
    "following_and_others": _render_partition,
}
