from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator


logger = logging.getLogger(__name__)


class TenantContext:
    """The storage tenant a request currently operates in.

    ``current`` is only changed through ``switched_to``, which always puts
    the previous tenant back, including when the body raises or returns
    early.
    """

    def __init__(self, tenant_id: int):
        self._current = int(tenant_id)

    @property
    def current(self) -> int:
        return self._current

    @contextmanager
    def switched_to(self, tenant_id: int) -> Iterator[int]:
        previous = self._current
        target = int(tenant_id)
        if target != previous:
            logger.debug("Switching tenant %s -> %s", previous, target, extra={"op": "tenant.switch", "tenant": target})
        self._current = target
        try:
            yield target
        finally:
            self._current = previous
