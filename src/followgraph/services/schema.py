"""SchemaService — store tables and the username uniqueness constraint.

Registration is idempotent: an already-registered constraint is not an
error. Any failure is reported as ``CONSTRAINT_REGISTRATION_ERROR``,
which the CLI bootstrap treats as fatal, since no other operation can
guarantee unique usernames without it.
"""

from __future__ import annotations

import logging

from followgraph.infrastructure.store.gateway import StoreError
from followgraph.infrastructure.store.schema import USERNAME_CONSTRAINT
from followgraph.services.base import BaseService
from followgraph.services.result import ErrorCode, ServiceResult
from followgraph.services.telemetry import traced

logger = logging.getLogger(__name__)


class SchemaService(BaseService):
    """Prepares the store before any traffic is served."""

    @traced
    async def ensure_constraints(self) -> ServiceResult:
        op = "ensure_constraints"
        spec = USERNAME_CONSTRAINT
        try:
            await self._store.create_tables()
            await self._store.execute_ddl(spec.create_sql)
        except StoreError as exc:
            logger.error("Could not register constraint %s: %s", spec.name, exc)
            return ServiceResult.failure(
                op,
                ErrorCode.CONSTRAINT_REGISTRATION_ERROR,
                f"Could not register uniqueness of {spec.label}.{spec.property}: {exc}",
                detail={"constraint": spec.name, "label": spec.label, "property": spec.property},
            )

        logger.debug("Constraint %s registered", spec.name)
        return ServiceResult(
            ok=True,
            op=op,
            data={"constraint": spec.name, "label": spec.label, "property": spec.property},
        )
