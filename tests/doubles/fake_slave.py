"""Loopback Modbus/TCP peer for transport-level tests.

Runs a one-client TCP server on 127.0.0.1 in a background thread. Each
received request is recorded and answered with the next scripted response.
"""

import queue
import socket
import struct
import threading
from typing import List, Optional

CLOSE = object()


def response_frame(
    transaction_id: int, unit_id: int, function: int, data: bytes = b""
) -> bytes:
    """Build a response frame with a correct MBAP length field.

    Example:
        >>> response_frame(1, 1, 0x83, b"\\x02").hex(" ")
        '00 01 00 00 00 03 01 83 02'
    """
    return struct.pack(">HHHBB", transaction_id, 0, len(data) + 2, unit_id, function) + data


class FakeSlave:
    """Threaded loopback Modbus/TCP slave.

    Responses are consumed one per request:
        - bytes: sent back as-is
        - ``FakeSlave.CLOSE``: the connection is closed without a reply
        - nothing scripted: the request is left unanswered

    Attributes:
        host: Listening address
        port: Listening port (chosen by the OS)
        requests: Every request frame received, in order

    Example:
        >>> with FakeSlave() as slave:
        ...     slave.add_response(response_frame(1, 1, 3, b"\\x02\\x00\\x01"))
        ...     master = ModbusMaster(slave.host, slave.port)
    """

    CLOSE = CLOSE

    def __init__(self):
        """Bind the listening socket."""
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen(1)
        self._server.settimeout(0.05)
        self.host, self.port = self._server.getsockname()

        self.requests: List[bytes] = []
        self._responses: "queue.Queue[object]" = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def __enter__(self) -> "FakeSlave":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start serving in the background."""
        self._thread.start()

    def stop(self) -> None:
        """Stop serving and release the listening socket."""
        self._stop.set()
        self._thread.join(timeout=2)
        self._server.close()

    def add_response(self, response) -> None:
        """Script the reply to the next unanswered request."""
        self._responses.put(response)

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                client, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with client:
                client.settimeout(0.05)
                self._handle(client)

    def _handle(self, client: socket.socket) -> None:
        while not self._stop.is_set():
            prefix = self._recv_exact(client, 6)
            if prefix is None:
                return
            length = struct.unpack(">H", prefix[4:6])[0]
            body = self._recv_exact(client, length)
            if body is None:
                return
            self.requests.append(prefix + body)

            try:
                response = self._responses.get_nowait()
            except queue.Empty:
                continue
            if response is CLOSE:
                return
            client.sendall(response)

    def _recv_exact(self, client: socket.socket, size: int) -> Optional[bytes]:
        buffer = b""
        while len(buffer) < size:
            if self._stop.is_set():
                return None
            try:
                chunk = client.recv(size - len(buffer))
            except socket.timeout:
                continue
            except OSError:
                return None
            if not chunk:
                return None
            buffer += chunk
        return buffer
