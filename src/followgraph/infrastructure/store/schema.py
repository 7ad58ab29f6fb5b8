"""SQLAlchemy Core table definitions for the graph store.

The graph is held in two tables: ``nodes`` (labelled vertices) and
``edges`` (typed, directed links between node rows). The username
uniqueness constraint is not part of :data:`metadata`; it is registered
separately at startup via raw DDL so that registration can be checked
and reported on its own.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

USER_LABEL = "User"
FOLLOWS = "FOLLOWS"

metadata = MetaData()

nodes = Table(
    "nodes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("label", Text, nullable=False),
    Column("username", Text),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

edges = Table(
    "edges",
    metadata,
    Column("source_id", Integer, ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False),
    Column("target_id", Integer, ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False),
    Column("type", Text, nullable=False, default=FOLLOWS, server_default=FOLLOWS),
    Column("created", Text, nullable=False),
    UniqueConstraint("source_id", "target_id", "type", name="uq_edges_source_target_type"),
)

Index("ix_nodes_label", nodes.c.label)
Index("ix_edges_target", edges.c.target_id)


# ---------------------------------------------------------------------------
# Uniqueness constraints, tagged with the (label, property) they protect
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UniqueConstraintSpec:
    """A named uniqueness rule and the graph label/property it guards."""

    name: str
    label: str
    property: str
    table: str
    columns: tuple[str, ...]

    @property
    def create_sql(self) -> str:
        """Idempotent DDL registering this constraint as a unique index."""
        cols = ", ".join(self.columns)
        return f"CREATE UNIQUE INDEX IF NOT EXISTS {self.name} ON {self.table} ({cols})"

    def matches(self, message: str) -> bool:
        """Whether a driver error message reports a violation of this constraint.

        PostgreSQL names the index; SQLite lists ``table.column`` pairs.
        """
        signature = ", ".join(f"{self.table}.{col}" for col in self.columns)
        return self.name in message or signature in message


USERNAME_CONSTRAINT = UniqueConstraintSpec(
    name="uq_nodes_user_username",
    label=USER_LABEL,
    property="username",
    table="nodes",
    columns=("label", "username"),
)

FOLLOWS_CONSTRAINT = UniqueConstraintSpec(
    name="uq_edges_source_target_type",
    label=FOLLOWS,
    property="source_id,target_id",
    table="edges",
    columns=("source_id", "target_id", "type"),
)

UNIQUE_CONSTRAINTS: tuple[UniqueConstraintSpec, ...] = (USERNAME_CONSTRAINT, FOLLOWS_CONSTRAINT)


def find_constraint(message: str) -> UniqueConstraintSpec | None:
    """Resolve a driver error message to a known uniqueness constraint."""
    for spec in UNIQUE_CONSTRAINTS:
        if spec.matches(message):
            return spec
    return None
