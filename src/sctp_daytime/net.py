from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Tuple

from .config import DaytimeConfig
from .errors import BindError, ConnectError
from .resolver import AddressCandidate, resolve
from .transport import Record, Transport

SocketFactory = Callable[[int, int, int], socket.socket]

NUMERIC = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV


@dataclass(frozen=True, slots=True)
class PeerIdentity:
    host: str
    port: str

    @classmethod
    def from_sockaddr(cls, sockaddr: Tuple[Any, ...]) -> "PeerIdentity":
        host, port = socket.getnameinfo(sockaddr, NUMERIC)
        return cls(host, port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class Connection:
    """An open multi-stream channel. Owns its socket; unusable once closed."""

    def __init__(self, sock: socket.socket, transport: Transport):
        self.sock = sock
        self.transport = transport
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed connection")

    def peer(self) -> PeerIdentity:
        self._check_open()
        return PeerIdentity.from_sockaddr(self.sock.getpeername())

    def enable_stream_info(self) -> None:
        self._check_open()
        self.transport.enable_stream_info(self.sock)

    def send_record(self, stream_id: int, data: bytes) -> int:
        self._check_open()
        return self.transport.send(self.sock, stream_id, data)

    def recv_record(self, bufsize: int) -> Optional[Record]:
        self._check_open()
        return self.transport.recv(self.sock, bufsize)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sock.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Connector:
    def __init__(
        self,
        transport: Transport,
        config: DaytimeConfig,
        socket_factory: SocketFactory = socket.socket,
    ):
        self.transport = transport
        self.config = config
        self.socket_factory = socket_factory

    def _attempt(self, candidate: AddressCandidate) -> Optional[socket.socket]:
        log = self.config.logger
        try:
            sock = self.socket_factory(candidate.family, self.transport.socktype, self.transport.proto)
        except OSError as exc:
            log.debug("socket failed for %s: %s", candidate.sockaddr, exc)
            return None
        try:
            sock.connect(candidate.sockaddr)
        except OSError as exc:
            log.debug("connect failed for %s: %s", candidate.sockaddr, exc)
            sock.close()
            return None
        return sock

    def connect(self, candidates: Iterable[AddressCandidate], host: str, port: str) -> Connection:
        """Return a connection to the first candidate that accepts, in order.

        Candidates after the first success are never tried. Raises
        ConnectError once every candidate has failed.
        """
        attempts = (self._attempt(c) for c in candidates)
        sock = next((s for s in attempts if s is not None), None)
        if sock is None:
            raise ConnectError(host, port)
        return Connection(sock, self.transport)


class Acceptor:
    def __init__(self, sock: socket.socket, transport: Transport, config: DaytimeConfig):
        self.sock = sock
        self.transport = transport
        self.config = config

    @classmethod
    def listening(
        cls,
        port: str | int,
        transport: Transport,
        config: DaytimeConfig,
        *,
        host: str | None = None,
        socket_factory: SocketFactory = socket.socket,
    ) -> "Acceptor":
        log = config.logger
        for candidate in resolve(host, port, passive=True):
            try:
                sock = socket_factory(candidate.family, transport.socktype, transport.proto)
            except OSError as exc:
                log.debug("socket failed for %s: %s", candidate.sockaddr, exc)
                continue

            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind(candidate.sockaddr)
            except OSError as exc:
                log.warning("bind failed for %s: %s", candidate.sockaddr, exc)
                sock.close()
                continue
            break
        else:
            raise BindError(str(port))

        try:
            sock.listen(config.backlog)
        except OSError as exc:
            sock.close()
            raise BindError(str(port), f"listen failed: {exc}") from exc

        log.info("listening on %s via %s", sock.getsockname(), transport.name)
        return cls(sock, transport, config)

    @property
    def address(self) -> Tuple[Any, ...]:
        return self.sock.getsockname()

    def accept(self) -> Optional[Tuple[Connection, Optional[PeerIdentity]]]:
        """Block for the next peer. Returns None when accept itself failed."""
        log = self.config.logger
        try:
            sock, sockaddr = self.sock.accept()
        except OSError as exc:
            log.error("accept failed: %s", exc)
            return None

        peer: Optional[PeerIdentity] = None
        try:
            peer = PeerIdentity.from_sockaddr(sockaddr)
        except OSError as exc:
            log.error("getnameinfo failed: %s", exc)
        else:
            log.debug("connection from %s", peer)

        return Connection(sock, self.transport), peer

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> "Acceptor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
