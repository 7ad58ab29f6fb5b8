"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``FOLLOWGRAPH_*`` prefix
  3. TOML file    — ``followgraph.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

The project root is the nearest directory, walking up from the CWD, that
holds either ``followgraph.toml`` or an existing default SQLite store
(``.followgraph/graph.db``). Commands run from anywhere inside a project
therefore share one store even when no config file was ever written.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from followgraph.config.models import StoreConfig
from followgraph.infrastructure.store.engine import STORE_DIRNAME, STORE_FILENAME, default_store_url

CONFIG_FILENAME = "followgraph.toml"
CONFIG_ENV_VAR = "FOLLOWGRAPH_CONFIG"


def locate_project(start: Path | None = None) -> tuple[Path, Path | None]:
    """Return ``(root, config_file)`` for the project enclosing *start*.

    ``FOLLOWGRAPH_CONFIG`` wins when set: its file (if it exists) is the
    config and its directory the root. Otherwise the nearest ancestor of
    *start* (default: cwd) holding ``followgraph.toml`` or a default store
    file is the root. With neither, *start* itself is the root.
    """
    origin = (start or Path.cwd()).resolve()

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return (p.parent, p) if p.is_file() else (origin, None)

    for current in (origin, *origin.parents):
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return current, candidate
        if (current / STORE_DIRNAME / STORE_FILENAME).is_file():
            return current, None
    return origin, None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``followgraph.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class FollowgraphSettings(BaseSettings):
    """Unified settings for the followgraph CLI.

    Attributes:
        root: Resolved project directory (parent of ``followgraph.toml``,
            or CWD if no config found). The default SQLite store lives here.
        config_path: Explicit ``--config`` override, or None for discovery.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FOLLOWGRAPH_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (derived from config location, not read from TOML) ---
    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    store: StoreConfig = Field(default_factory=StoreConfig)

    @property
    def store_url(self) -> str:
        """Configured store URL, or the SQLite file under :attr:`root`."""
        return self.store.url or default_store_url(self.root)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> FollowgraphSettings:
        """Construct settings from CLI invocation.

        Locates the project via :func:`locate_project` (or the explicit
        *config_path*), and merges CLI flags as highest-priority overrides.
        An explicit *root* is used as given.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
            found_root = p.parent if toml_path else Path.cwd()
        else:
            found_root, toml_path = locate_project(root)

        resolved_root = root if root is not None else found_root

        _tls.toml_path = toml_path
        try:
            return cls(
                root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
