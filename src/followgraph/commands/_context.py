"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Owns the bridge from Click's synchronous commands
to the async services, and centralized result emission (stdout/stderr
routing + exit codes).

Every command runs inside :meth:`AppContext.run`, which opens the store,
registers the username constraint, and only then runs the command's
operation. A failed registration is emitted as the command's result and
nothing else runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio
import click

from followgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from followgraph.config.settings import FollowgraphSettings
    from followgraph.infrastructure.store.gateway import GraphStore
    from followgraph.services.result import ServiceResult

    Operation = Callable[[GraphStore], Awaitable[ServiceResult]]


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is opened per command invocation, never at group level,
    so ``--help`` and ``--version`` never touch it.
    """

    def __init__(self, settings: FollowgraphSettings) -> None:
        self.settings = settings

        # Configure structured logging
        from followgraph.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            store_url=settings.store_url,
            echo_sql=settings.store.echo,
        )

        # Enable telemetry context var when verbose
        if settings.verbose:
            from followgraph.services.telemetry import enable_telemetry

            enable_telemetry()

    def open_store(self) -> GraphStore:
        """Build a gateway over a fresh engine for the configured URL."""
        from followgraph.infrastructure.store.engine import create_store_engine
        from followgraph.infrastructure.store.gateway import GraphStore
        from followgraph.services.telemetry import record_store_request

        engine = create_store_engine(self.settings.store_url)
        return GraphStore(
            engine,
            request_timeout=self.settings.store.request_timeout,
            observer=record_store_request,
        )

    async def _run(self, operation: Operation | None) -> ServiceResult:
        from followgraph.services.schema import SchemaService

        store = self.open_store()
        try:
            registered = await SchemaService(store).ensure_constraints()
            if not registered.ok or operation is None:
                return registered
            return await operation(store)
        finally:
            await store.dispose()

    def run(self, operation: Operation | None = None) -> None:
        """Run *operation* against a prepared store and emit its result.

        With no operation, the registration result itself is emitted.
        """
        self.emit(anyio.run(self._run, operation))

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
