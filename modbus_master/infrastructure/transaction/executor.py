"""Transaction executor for Modbus/TCP request/response exchanges.

A transaction is written once, as a generator that yields the I/O it needs
(``IOStep``) and receives the bytes that came back. Two drivers run it: one
performs each step with blocking socket calls, the other awaits the asyncio
forms. Wire bytes and decoded values are therefore identical in both modes.
"""

import asyncio
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto
from time import monotonic
from typing import Generator, Iterator, Optional

from ...const import MAX_ADU_SIZE, MBAP_LENGTH_OFFSET, MBAP_PREFIX_SIZE
from ...domain.exceptions import (
    MalformedResponseError,
    ModbusTimeoutError,
    TransactionInProgressError,
)
from ...domain.interfaces import IConnection
from ...domain.value_objects import ModbusFrame
from ..decorators import handle_transport_errors, require_connection
from ..protocol import ResponseDecoder
from ..state_machines import TransactionEvent, TransactionState, TransactionStateMachine

_LOGGER = logging.getLogger(__name__)


class IOAction(Enum):
    """I/O operations a transaction can request."""

    SEND = auto()
    RECEIVE = auto()


@dataclass(frozen=True)
class IOStep:
    """One I/O request yielded by the transaction routine.

    Attributes:
        action: SEND or RECEIVE
        data: Bytes to send (SEND only)
        size: Maximum bytes to receive (RECEIVE only)
    """

    action: IOAction
    data: bytes = b""
    size: int = 0


TransactionRoutine = Generator[IOStep, bytes, bytes]


class TransactionExecutor:
    """Runs one request/response exchange at a time over a connection.

    Flow:
        1. The connection must be live, otherwise it is torn down and
           ``NotConnectedError`` is raised
        2. The encoded frame is sent in full
        3. The MBAP prefix is read, then the rest of the frame it announces.
           The connection timeout bounds each read, and no further read
           starts once the timeout has elapsed since the first one
        4. The response is handed to the ``ResponseDecoder``

    Any failure in steps 2-4, including cancellation of an awaiting
    coroutine, disconnects before the error propagates.

    At most one transaction is in flight per connection. Blocking callers
    queue on a thread lock and asyncio callers queue on an asyncio lock.
    A caller in one mode is rejected with ``TransactionInProgressError``
    while a transaction of the other mode holds the connection.

    Example:
        >>> executor = TransactionExecutor(connection)
        >>> frame = FrameEncoder().build_read_request(1, 1, 3, 0, 2)
        >>> executor.execute(frame)
        b'\\x00\\x01\\x00\\n'
    """

    def __init__(
        self,
        connection: IConnection,
        decoder: Optional[ResponseDecoder] = None,
    ):
        """Initialize executor.

        Args:
            connection: Connection the transactions run over
            decoder: Response decoder (defaults to ``ResponseDecoder()``)
        """
        self._connection = connection
        self._decoder = decoder or ResponseDecoder()
        self._state = TransactionStateMachine()
        self._thread_lock = threading.Lock()
        self._async_lock = asyncio.Lock()
        self._async_in_flight = False

    @property
    def state(self) -> TransactionState:
        """Current transaction state."""
        return self._state.state

    @property
    def in_flight(self) -> bool:
        """Check if a transaction is currently running."""
        return self._state.is_in_flight

    @handle_transport_errors("Modbus transaction")
    def execute(self, frame: ModbusFrame) -> bytes:
        """Run a transaction, blocking the calling thread.

        Args:
            frame: Request frame

        Returns:
            Decoded payload bytes

        Raises:
            NotConnectedError: If the connection is down
            TransactionInProgressError: If an asyncio transaction is in flight
            ModbusTimeoutError: If the unit does not answer in time
            ModbusProtocolError: If the unit returned an exception response
            MalformedResponseError: If the response is truncated
        """
        if not self._thread_lock.acquire(blocking=False):
            if self._async_in_flight:
                raise TransactionInProgressError(
                    "An asyncio transaction is in flight on this connection"
                )
            self._thread_lock.acquire()
        try:
            return self._run_blocking(frame)
        finally:
            self._thread_lock.release()

    @handle_transport_errors("Modbus transaction")
    async def execute_async(self, frame: ModbusFrame) -> bytes:
        """Coroutine form of :meth:`execute`.

        Raises:
            TransactionInProgressError: If a blocking transaction is in flight
        """
        async with self._async_lock:
            if not self._thread_lock.acquire(blocking=False):
                raise TransactionInProgressError(
                    "A blocking transaction is in flight on this connection"
                )
            self._async_in_flight = True
            try:
                return await self._run_async(frame)
            finally:
                self._async_in_flight = False
                self._thread_lock.release()

    @require_connection()
    def _run_blocking(self, frame: ModbusFrame) -> bytes:
        routine = self._transaction(frame)
        deadline = None
        with self._failure_guard():
            try:
                step = next(routine)
                while True:
                    if step.action is IOAction.SEND:
                        self._connection.send(step.data)
                        reply = b""
                    else:
                        deadline = self._check_deadline(deadline)
                        reply = self._connection.receive(step.size)
                    step = routine.send(reply)
            except StopIteration as done:
                return done.value

    @require_connection()
    async def _run_async(self, frame: ModbusFrame) -> bytes:
        routine = self._transaction(frame)
        deadline = None
        with self._failure_guard():
            try:
                step = next(routine)
                while True:
                    if step.action is IOAction.SEND:
                        await self._connection.send_async(step.data)
                        reply = b""
                    else:
                        deadline = self._check_deadline(deadline)
                        reply = await self._connection.receive_async(step.size)
                    step = routine.send(reply)
            except StopIteration as done:
                return done.value

    def _transaction(self, frame: ModbusFrame) -> TransactionRoutine:
        """Single transaction routine shared by both drivers."""
        request = frame.to_bytes()
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Transaction %s", frame)

        self._state.transition(TransactionEvent.SEND)
        yield IOStep(IOAction.SEND, data=request)
        self._state.transition(TransactionEvent.SENT)

        response = yield IOStep(IOAction.RECEIVE, size=MBAP_PREFIX_SIZE)
        if not response:
            raise ModbusTimeoutError(
                f"No response to transaction {frame.transaction_id}: "
                "connection closed by peer"
            )

        response = yield from self._receive_until(response, MBAP_PREFIX_SIZE)
        if len(response) == MBAP_PREFIX_SIZE:
            length = int.from_bytes(
                response[MBAP_LENGTH_OFFSET:MBAP_PREFIX_SIZE], "big"
            )
            expected = MBAP_PREFIX_SIZE + length
            if expected > MAX_ADU_SIZE:
                raise MalformedResponseError(
                    f"Response declares {expected} bytes, "
                    f"more than the {MAX_ADU_SIZE}-byte maximum"
                )
            response = yield from self._receive_until(response, expected)

        self._state.transition(TransactionEvent.RESPONSE_RECEIVED)
        self._check_transaction_id(frame, response)

        payload = self._decoder.decode(response, int(frame.function_code))
        self._state.transition(TransactionEvent.DECODED)
        return payload

    @staticmethod
    def _receive_until(buffer: bytes, size: int) -> TransactionRoutine:
        """Keep receiving until ``size`` bytes are buffered or the peer stops."""
        while len(buffer) < size:
            chunk = yield IOStep(IOAction.RECEIVE, size=size - len(buffer))
            if not chunk:
                # Truncated frame is left for the decoder to reject
                break
            buffer += chunk
        return buffer

    def _check_deadline(self, deadline: Optional[float]) -> float:
        """Start the response deadline, or raise once it has passed."""
        now = monotonic()
        if deadline is None:
            return now + self._connection.timeout / 1000
        if now >= deadline:
            raise ModbusTimeoutError(
                f"Response not complete within {self._connection.timeout} ms"
            )
        return deadline

    @staticmethod
    def _check_transaction_id(frame: ModbusFrame, response: bytes) -> None:
        if len(response) < 2:
            return
        echoed = int.from_bytes(response[:2], "big")
        if echoed != frame.transaction_id:
            _LOGGER.warning(
                "Response transaction id %d does not match request id %d",
                echoed,
                frame.transaction_id,
            )

    @contextmanager
    def _failure_guard(self) -> Iterator[None]:
        """Disconnect on any failure, including cancellation."""
        try:
            yield
        except BaseException:
            self._state.transition(TransactionEvent.FAIL)
            self._connection.disconnect()
            raise
