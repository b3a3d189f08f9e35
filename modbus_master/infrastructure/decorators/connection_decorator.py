"""Connection management decorators."""

import asyncio
import logging
from functools import wraps
from typing import Callable

from ...domain.exceptions import NotConnectedError

_LOGGER = logging.getLogger(__name__)


def require_connection(connection_attr: str = "_connection"):
    """Decorator to ensure a live connection before an operation.

    If the connection is down, it is torn down (``disconnect()``) so no
    half-open socket lingers, and ``NotConnectedError`` is raised.
    Reconnecting is the caller's decision.

    Args:
        connection_attr: Name of the attribute holding the ``IConnection``

    Example:
        @require_connection()
        def _run_blocking(self, frame: ModbusFrame) -> bytes:
            # Connection is guaranteed - just do work
            ...
    """

    def decorator(func: Callable):
        def ensure_connected(owner) -> None:
            connection = getattr(owner, connection_attr)
            if connection.connected:
                return
            connection.disconnect()
            _LOGGER.debug("%s called without a connection", func.__qualname__)
            raise NotConnectedError("Not connected")

        @wraps(func)
        async def async_wrapper(self, *args, **kwargs):
            ensure_connected(self)
            return await func(self, *args, **kwargs)

        @wraps(func)
        def sync_wrapper(self, *args, **kwargs):
            ensure_connected(self)
            return func(self, *args, **kwargs)

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper

    return decorator
