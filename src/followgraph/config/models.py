"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, followgraph.toml only
contains overrides. An empty file (or none at all) is a valid config.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    # None means the SQLite file under the resolved root.
    url: str | None = None
    request_timeout: float | None = Field(default=30.0, gt=0)
    echo: bool = False
