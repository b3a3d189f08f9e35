"""Error handling decorators for standardized exception logging."""

import asyncio
import logging
from functools import wraps
from typing import Any, Callable

from ...domain.exceptions import (
    MalformedResponseError,
    ModbusProtocolError,
    NotConnectedError,
    TransactionInProgressError,
)


def handle_transport_errors(
    operation_name: str,
    logger: logging.Logger = None,
    reraise: bool = True,
    default_return: Any = None,
):
    """Decorator for standardized transport error handling.

    Logs each failure category at a fitting level, then re-raises (default)
    or returns ``default_return``.

    Args:
        operation_name: Human-readable operation name for logging
        logger: Logger to use (defaults to function's module logger)
        reraise: Whether to re-raise exception after logging
        default_return: Value to return on error if not re-raising

    Example:
        @handle_transport_errors("Modbus transaction", reraise=True)
        def execute(self, frame: ModbusFrame) -> bytes:
            # Clean implementation without try/except
            ...
    """

    def decorator(func: Callable):
        def log_failure(log: logging.Logger, err: Exception) -> None:
            if isinstance(err, (TimeoutError, asyncio.TimeoutError)):
                log.warning("%s timed out: %s", operation_name, err)
            elif isinstance(err, ModbusProtocolError):
                # Expected device error - log without stack trace
                log.info("%s device exception: %s", operation_name, err)
            elif isinstance(err, (NotConnectedError, TransactionInProgressError)):
                log.warning("%s rejected: %s", operation_name, err)
            elif isinstance(err, MalformedResponseError):
                log.error("%s malformed response: %s", operation_name, err)
            elif isinstance(err, OSError):
                log.error("%s socket error: %s", operation_name, err)
            else:
                log.error(
                    "%s unexpected error: %s",
                    operation_name,
                    err,
                    exc_info=True,
                )

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            log = logger or logging.getLogger(func.__module__)
            try:
                return await func(*args, **kwargs)
            except Exception as err:
                log_failure(log, err)
                if reraise:
                    raise
                return default_return

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            log = logger or logging.getLogger(func.__module__)
            try:
                return func(*args, **kwargs)
            except Exception as err:
                log_failure(log, err)
                if reraise:
                    raise
                return default_return

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper

    return decorator
