"""The logical queries the services issue against the store.

Each builder returns a SQLAlchemy statement (or, for the cascading
delete, the ordered statements of one transaction). Users are always
addressed by username; row ids are only used for joins inside a
statement and never cross the gateway boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, insert, literal, or_, select, true, update

from followgraph.infrastructure.store.schema import FOLLOWS, USER_LABEL, edges, nodes

if TYPE_CHECKING:
    from sqlalchemy import Delete, Insert, Select, Update

_USER_COLUMNS = (nodes.c.username, nodes.c.created, nodes.c.modified)


def _user_ids(username: str) -> Select[Any]:
    return select(nodes.c.id).where(nodes.c.label == USER_LABEL, nodes.c.username == username)


def create_user(props: dict[str, Any], now: str) -> Insert:
    """Insert a User node and return its record."""
    return (
        insert(nodes)
        .values(label=USER_LABEL, created=now, modified=now, **props)
        .returning(*_USER_COLUMNS)
    )


def get_user(username: str) -> Select[Any]:
    return select(*_USER_COLUMNS).where(nodes.c.label == USER_LABEL, nodes.c.username == username)


def get_all_users() -> Select[Any]:
    return select(*_USER_COLUMNS).where(nodes.c.label == USER_LABEL)


def patch_user(username: str, changes: dict[str, Any], now: str) -> Update:
    """Merge *changes* onto one User node; returns no row if it is gone.

    Only the given columns (plus ``modified``) are written.
    """
    return (
        update(nodes)
        .where(nodes.c.label == USER_LABEL, nodes.c.username == username)
        .values(**changes, modified=now)
        .returning(*_USER_COLUMNS)
    )


def delete_user_and_edges(username: str) -> tuple[Delete, Delete]:
    """Statements removing a User node and every edge touching it."""
    ids = _user_ids(username)
    return (
        delete(edges).where(or_(edges.c.source_id.in_(ids), edges.c.target_id.in_(ids))),
        delete(nodes).where(nodes.c.label == USER_LABEL, nodes.c.username == username),
    )


def create_edge_if_absent(source: str, target: str, now: str) -> Insert:
    """Insert ``source -[FOLLOWS]-> target`` unless it already exists.

    Inserts nothing when either user is missing.
    """
    src = nodes.alias("src")
    tgt = nodes.alias("tgt")
    existing = (
        select(edges.c.source_id)
        .where(
            edges.c.source_id == src.c.id,
            edges.c.target_id == tgt.c.id,
            edges.c.type == FOLLOWS,
        )
        .correlate(src, tgt)
        .exists()
    )
    pair = (
        select(src.c.id, tgt.c.id, literal(FOLLOWS), literal(now))
        .select_from(src.join(tgt, true()))
        .where(
            src.c.label == USER_LABEL,
            src.c.username == source,
            tgt.c.label == USER_LABEL,
            tgt.c.username == target,
            ~existing,
        )
    )
    return insert(edges).from_select(["source_id", "target_id", "type", "created"], pair)


def delete_edge_if_present(source: str, target: str) -> Delete:
    return delete(edges).where(
        edges.c.source_id.in_(_user_ids(source)),
        edges.c.target_id.in_(_user_ids(target)),
        edges.c.type == FOLLOWS,
    )


def users_with_edge_presence(subject: str) -> Select[Any]:
    """Every User other than *subject*, flagged by whether *subject* follows them.

    One row per other user: the subject is joined to all other User nodes
    (excluded by row identity, so a self-edge never shows up) with an
    outer join on the subject's outgoing edge.
    """
    me = nodes.alias("me")
    other = nodes.alias("other")
    follows = edges.alias("follows")
    joined = me.join(other, and_(other.c.label == USER_LABEL, other.c.id != me.c.id)).outerjoin(
        follows,
        and_(
            follows.c.source_id == me.c.id,
            follows.c.target_id == other.c.id,
            follows.c.type == FOLLOWS,
        ),
    )
    return (
        select(
            other.c.username,
            other.c.created,
            other.c.modified,
            follows.c.source_id.is_not(None).label("following"),
        )
        .select_from(joined)
        .where(me.c.label == USER_LABEL, me.c.username == subject)
    )
