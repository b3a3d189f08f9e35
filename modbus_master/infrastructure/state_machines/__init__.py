"""State machines for managing transaction state transitions."""

from .transaction_state_machine import (
    TransactionStateMachine,
    TransactionState,
    TransactionEvent,
)

__all__ = [
    "TransactionStateMachine",
    "TransactionState",
    "TransactionEvent",
]
