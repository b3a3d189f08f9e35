"""Transaction state machine for the request/response cycle."""

import logging
from enum import Enum, auto

_LOGGER = logging.getLogger(__name__)


class TransactionState(Enum):
    """Transaction states."""

    IDLE = auto()
    SENDING = auto()
    AWAITING_RESPONSE = auto()
    DECODING = auto()
    FAILED = auto()


class TransactionEvent(Enum):
    """Transaction events that trigger state transitions."""

    SEND = auto()
    SENT = auto()
    RESPONSE_RECEIVED = auto()
    DECODED = auto()
    FAIL = auto()


class TransactionStateMachine:
    """State machine for one request/response cycle at a time.

    Valid transitions:
        IDLE -> SENDING (on SEND)
        FAILED -> SENDING (on SEND, after the connection was torn down)
        SENDING -> AWAITING_RESPONSE (on SENT)
        AWAITING_RESPONSE -> DECODING (on RESPONSE_RECEIVED)
        DECODING -> IDLE (on DECODED)
        SENDING / AWAITING_RESPONSE / DECODING -> FAILED (on FAIL)

    Example:
        >>> sm = TransactionStateMachine()
        >>> sm.transition(TransactionEvent.SEND)
        True
        >>> sm.is_in_flight
        True
        >>> sm.transition(TransactionEvent.DECODED)
        False
    """

    def __init__(self):
        """Initialize state machine in IDLE state."""
        self._state = TransactionState.IDLE

        # Valid transitions: (current_state, event) -> new_state
        self._transitions = {
            (TransactionState.IDLE, TransactionEvent.SEND): TransactionState.SENDING,
            (TransactionState.FAILED, TransactionEvent.SEND): TransactionState.SENDING,
            (
                TransactionState.SENDING,
                TransactionEvent.SENT,
            ): TransactionState.AWAITING_RESPONSE,
            (
                TransactionState.AWAITING_RESPONSE,
                TransactionEvent.RESPONSE_RECEIVED,
            ): TransactionState.DECODING,
            (TransactionState.DECODING, TransactionEvent.DECODED): TransactionState.IDLE,
        }
        for state in (
            TransactionState.SENDING,
            TransactionState.AWAITING_RESPONSE,
            TransactionState.DECODING,
        ):
            self._transitions[(state, TransactionEvent.FAIL)] = TransactionState.FAILED

    @property
    def state(self) -> TransactionState:
        """Get current state."""
        return self._state

    @property
    def is_in_flight(self) -> bool:
        """Check if a request has been started and not yet finished."""
        return self._state in (
            TransactionState.SENDING,
            TransactionState.AWAITING_RESPONSE,
            TransactionState.DECODING,
        )

    def transition(self, event: TransactionEvent) -> bool:
        """Attempt state transition.

        Args:
            event: Event triggering transition

        Returns:
            True if transition valid and executed, False otherwise
        """
        key = (self._state, event)

        if key not in self._transitions:
            _LOGGER.debug(
                "Invalid transition: %s + %s",
                self._state.name,
                event.name,
            )
            return False

        previous = self._state
        self._state = self._transitions[key]

        _LOGGER.debug(
            "Transaction state: %s -> %s (event: %s)",
            previous.name,
            self._state.name,
            event.name,
        )
        return True

    def __str__(self) -> str:
        """String representation."""
        return f"TransactionStateMachine(state={self._state.name})"

    def __repr__(self) -> str:
        """Developer representation."""
        return f"TransactionStateMachine(state={self._state!r})"
