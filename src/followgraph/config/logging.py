"""structlog configuration for followgraph.

Two output modes, both on stderr so piped command output stays clean:
- Human (default): console-rendered lines
- JSON (--log-json): one JSON object per line

Every record carries the store it was emitted against (``store_backend``
and ``store``, the URL with any password masked), so logs from several
projects or servers can be told apart. SQL echo (``[store] echo``) is
routed through the same handler instead of SQLAlchemy's own stdout
handler.
"""

from __future__ import annotations

import logging
import sys

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

# Loggers that are chatty at INFO/DEBUG; held at WARNING unless echo is on.
_DRIVER_LOGGERS = ("sqlalchemy", "aiosqlite", "asyncpg")


def store_log_context(store_url: str) -> dict[str, str]:
    """Fields identifying *store_url* in log records, password masked."""
    try:
        url = make_url(store_url)
    except ArgumentError:
        return {"store_backend": "unparsable"}
    return {
        "store_backend": url.get_backend_name(),
        "store": url.render_as_string(hide_password=True),
    }


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    store_url: str | None = None,
    echo_sql: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output for followgraph. When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
        store_url: Store the invocation talks to; bound to every record.
        echo_sql: Log each SQL statement (``sqlalchemy.engine`` at INFO).
    """
    app_level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    structlog.contextvars.clear_contextvars()
    if store_url is not None:
        structlog.contextvars.bind_contextvars(**store_log_context(store_url))

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("followgraph").setLevel(app_level)
    for name in _DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if echo_sql:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
