"""Graph store: async engine, schema, gateway, and logical queries."""

from followgraph.infrastructure.store.engine import create_store_engine, default_store_url
from followgraph.infrastructure.store.gateway import (
    ConstraintViolation,
    GraphStore,
    StatementResult,
    StoreError,
)
from followgraph.infrastructure.store.schema import (
    FOLLOWS,
    FOLLOWS_CONSTRAINT,
    USER_LABEL,
    USERNAME_CONSTRAINT,
    edges,
    metadata,
    nodes,
)

__all__ = [
    "FOLLOWS",
    "FOLLOWS_CONSTRAINT",
    "USERNAME_CONSTRAINT",
    "USER_LABEL",
    "ConstraintViolation",
    "GraphStore",
    "StatementResult",
    "StoreError",
    "create_store_engine",
    "default_store_url",
    "edges",
    "metadata",
    "nodes",
]
