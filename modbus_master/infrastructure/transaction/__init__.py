"""Transaction execution over a Modbus/TCP connection."""

from .executor import IOAction, IOStep, TransactionExecutor

__all__ = [
    "IOAction",
    "IOStep",
    "TransactionExecutor",
]
