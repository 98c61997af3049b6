from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .codec import DaytimeStream, format_daytime, send_message
from .config import DaytimeConfig
from .errors import SendError
from .net import Acceptor, Connection, PeerIdentity

Clock = Callable[[], float]


class ServerState(enum.Enum):
    ACCEPTING = "accepting"
    SENDING_LOCAL = "sending_local"
    SENDING_GMT = "sending_gmt"
    CLOSED = "closed"


@dataclass(slots=True)
class ServerMetrics:
    connections: int = 0
    accept_failures: int = 0


class ServerSession:
    """One pass of the server loop: accept a peer, send both clocks, close."""

    def __init__(self, acceptor: Acceptor, config: DaytimeConfig, clock: Clock = time.time):
        self.acceptor = acceptor
        self.config = config
        self.clock = clock
        self.state = ServerState.ACCEPTING
        self.connection: Optional[Connection] = None
        self.peer: Optional[PeerIdentity] = None
        self.send_failures = 0

    def accept(self) -> bool:
        self.state = ServerState.ACCEPTING
        accepted = self.acceptor.accept()
        if accepted is None:
            return False
        self.connection, self.peer = accepted
        return True

    def respond(self) -> None:
        assert self.connection is not None, "respond() before a successful accept()"
        try:
            self.state = ServerState.SENDING_LOCAL
            self._send(DaytimeStream.LOCAL_TIME, local=True)

            self.state = ServerState.SENDING_GMT
            self._send(DaytimeStream.GMT_TIME, local=False)
        finally:
            self.state = ServerState.CLOSED
            self.connection.close()

    def run(self) -> bool:
        if not self.accept():
            return False
        self.respond()
        return True

    def _send(self, stream: DaytimeStream, local: bool) -> None:
        log = self.config.logger
        text = format_daytime(local, self.clock(), log)
        try:
            send_message(self.connection, stream, text)
        except SendError as exc:
            self.send_failures += 1
            log.error("send failed (%s stream): %s", "local time" if local else "gmt time", exc)


class DaytimeServer:
    """Owns the listening endpoint and runs sessions until stopped.

    Sequential by default. With ``concurrent=True`` each accepted
    connection is answered on its own thread; sessions share nothing.
    """

    def __init__(
        self,
        acceptor: Acceptor,
        config: DaytimeConfig,
        clock: Clock = time.time,
        concurrent: bool = False,
    ):
        self.acceptor = acceptor
        self.config = config
        self.clock = clock
        self.concurrent = concurrent

    def serve_forever(self, limit: Optional[int] = None) -> ServerMetrics:
        metrics = ServerMetrics()
        workers: list[threading.Thread] = []

        while limit is None or metrics.connections < limit:
            session = ServerSession(self.acceptor, self.config, self.clock)
            if not session.accept():
                metrics.accept_failures += 1
                continue
            metrics.connections += 1

            if self.concurrent:
                t = threading.Thread(target=session.respond, daemon=True)
                t.start()
                workers.append(t)
                workers = [w for w in workers if w.is_alive()]
            else:
                session.respond()

        for t in workers:
            t.join()
        return metrics
