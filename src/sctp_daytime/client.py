from __future__ import annotations

import enum
import socket
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from .codec import StreamKind, StreamMessage, receive_message
from .config import DaytimeConfig
from .errors import ReceiveError
from .net import Connection, Connector, PeerIdentity, SocketFactory
from .resolver import resolve
from .transport import get_transport


class ClientState(enum.Enum):
    RESOLVING = "resolving"
    CONNECTING = "connecting"
    ENABLING_EVENTS = "enabling_events"
    RECEIVING = "receiving"
    CLOSED = "closed"


@dataclass(slots=True)
class ClientMetrics:
    records: int = 0
    local: int = 0
    gmt: int = 0
    unknown: int = 0
    bytes_received: int = 0


class ClientSession:
    """Connect to a daytime server and print every record until it hangs up.

    Resolution and connect failures propagate to the caller; everything
    after that is contained here. The connection is released exactly once,
    whichever state the session leaves from.
    """

    def __init__(
        self,
        host: str,
        port: str,
        config: DaytimeConfig,
        out: Optional[TextIO] = None,
        socket_factory: SocketFactory = socket.socket,
    ):
        self.host = host
        self.port = port
        self.config = config
        self.out = out if out is not None else sys.stdout
        self.transport = get_transport(config.transport)
        self.socket_factory = socket_factory
        self.state = ClientState.RESOLVING

    def run(self) -> ClientMetrics:
        log = self.config.logger
        metrics = ClientMetrics()
        connection: Optional[Connection] = None

        try:
            self.state = ClientState.RESOLVING
            candidates = resolve(self.host, self.port, passive=False)

            self.state = ClientState.CONNECTING
            connector = Connector(self.transport, self.config, self.socket_factory)
            connection = connector.connect(candidates, self.host, self.port)

            try:
                peer = connection.peer()
            except OSError as exc:
                log.error("getpeername or getnameinfo: %s", exc)
                return metrics

            self.state = ClientState.ENABLING_EVENTS
            try:
                connection.enable_stream_info()
            except OSError as exc:
                log.error("setsockopt failed: %s", exc)

            self.state = ClientState.RECEIVING
            self._receive_loop(connection, peer, metrics)
        finally:
            self.state = ClientState.CLOSED
            if connection is not None:
                connection.close()

        return metrics

    def _receive_loop(self, connection: Connection, peer: PeerIdentity, metrics: ClientMetrics) -> None:
        while True:
            try:
                msg = receive_message(connection, self.config.buffer_size)
            except ReceiveError as exc:
                self.config.logger.error("receive failed: %s", exc)
                return
            if msg is None:
                return

            metrics.records += 1
            metrics.bytes_received += msg.length
            self.display(peer, msg, metrics)

    def display(self, peer: PeerIdentity, msg: StreamMessage, metrics: ClientMetrics) -> None:
        kind = msg.kind
        if kind is StreamKind.UNKNOWN:
            metrics.unknown += 1
            self.config.logger.warning("ignoring message from unknown stream %d", msg.stream_id)
            return

        if kind is StreamKind.LOCAL_TIME:
            metrics.local += 1
        else:
            metrics.gmt += 1
        print(f"{peer}\t {msg.text} ({kind.label})", file=self.out)
