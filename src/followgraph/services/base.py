"""BaseService — abstract foundation for all followgraph services.

Every service receives a :class:`GraphStore` at construction time. Each
public coroutine issues exactly one store request through it, so there
is no transaction handling at this layer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from followgraph.infrastructure.store.gateway import StoreError
from followgraph.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from followgraph.infrastructure.store.gateway import GraphStore

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class UserService(BaseService):
            async def get(self, username: str) -> ServiceResult:
                rows = await self._store.fetch(queries.get_user(username))
                ...
    """

    def __init__(self, store: GraphStore) -> None:
        self._store = store

    @staticmethod
    def _store_failure(op: str, exc: StoreError) -> ServiceResult:
        """Report a store failure unchanged to the caller."""
        logger.debug("%s failed at the store", op, exc_info=True)
        return ServiceResult.failure(op, ErrorCode.STORE_ERROR, str(exc))
