from __future__ import annotations

import socket
from typing import Any, Optional, Tuple

import pytest

from sctp_daytime.constants import SCTP_SNDRCV, SOL_SCTP
from sctp_daytime.transport import SNDRCV


class FakeSocket:
    """Scripted stand-in for an SCTP socket."""

    def __init__(
        self,
        family: int = socket.AF_INET,
        type: int = socket.SOCK_STREAM,
        proto: int = 0,
        *,
        peer: Tuple[Any, ...] = ("127.0.0.1", 9999),
        records: Optional[list] = None,
        connect_error: Optional[OSError] = None,
        bind_error: Optional[OSError] = None,
        setsockopt_error: Optional[OSError] = None,
        accepts: Optional[list] = None,
        send_limit: Optional[int] = None,
    ):
        self.family = family
        self.type = type
        self.proto = proto
        self.peer = peer
        self.records = list(records or [])
        self.connect_error = connect_error
        self.bind_error = bind_error
        self.setsockopt_error = setsockopt_error
        self.accepts = list(accepts or [])
        self.send_limit = send_limit

        self.connected_to: Optional[Tuple[Any, ...]] = None
        self.bound_to: Optional[Tuple[Any, ...]] = None
        self.backlog: Optional[int] = None
        self.options: list[tuple] = []
        self.sent: list[tuple] = []
        self.close_count = 0

    def connect(self, addr):
        self.connected_to = addr
        if self.connect_error is not None:
            raise self.connect_error

    def bind(self, addr):
        if self.bind_error is not None:
            raise self.bind_error
        self.bound_to = addr

    def listen(self, backlog):
        self.backlog = backlog

    def accept(self):
        item = self.accepts.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def setsockopt(self, level, option, value):
        if self.setsockopt_error is not None and level != socket.SOL_SOCKET:
            raise self.setsockopt_error
        self.options.append((level, option, value))

    def getpeername(self):
        return self.peer

    def getsockname(self):
        return self.bound_to or ("0.0.0.0", 0)

    def sendmsg(self, buffers, ancdata=()):
        data = b"".join(buffers)
        self.sent.append((data, list(ancdata)))
        if self.send_limit is not None:
            return min(len(data), self.send_limit)
        return len(data)

    def recvmsg(self, bufsize, ancbufsize=0, flags=0):
        if not self.records:
            return b"", [], 0, None
        item = self.records.pop(0)
        if isinstance(item, BaseException):
            raise item
        stream_id, data = item
        info = SNDRCV.pack(stream_id, 0, 0, 0, 0, 0, 0, 0, 0)
        return data[:bufsize], [(SOL_SCTP, SCTP_SNDRCV, info)], 0, None

    def close(self):
        self.close_count += 1


class FakeNetwork:
    """Socket factory that hands out FakeSockets and remembers them.

    ``refuse`` lists sockaddrs whose connect/bind fails; ``unsupported``
    lists address families for which socket creation fails.
    """

    def __init__(self, **socket_kwargs):
        self.socket_kwargs = socket_kwargs
        self.refuse: set = set()
        self.unsupported: set = set()
        self.sockets: list[FakeSocket] = []

    def __call__(self, family, type, proto):
        if family in self.unsupported:
            raise OSError(97, "Address family not supported by protocol")
        sock = _RefusingSocket(self, family, type, proto, **self.socket_kwargs)
        self.sockets.append(sock)
        return sock


class _RefusingSocket(FakeSocket):
    def __init__(self, network: FakeNetwork, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.network = network

    def connect(self, addr):
        if addr in self.network.refuse:
            self.connected_to = addr
            raise ConnectionRefusedError(111, "Connection refused")
        super().connect(addr)

    def bind(self, addr):
        if addr in self.network.refuse:
            raise OSError(98, "Address already in use")
        super().bind(addr)


def fake_addrinfo(*sockaddrs):
    infos = []
    for sockaddr in sockaddrs:
        family = socket.AF_INET6 if ":" in sockaddr[0] else socket.AF_INET
        infos.append((family, socket.SOCK_STREAM, socket.IPPROTO_TCP, "", sockaddr))

    def getaddrinfo(host, port, family=0, type=0, proto=0, flags=0):
        return list(infos)

    return getaddrinfo


@pytest.fixture
def fake_socket():
    return FakeSocket


@pytest.fixture
def network():
    return FakeNetwork


@pytest.fixture
def addrinfo(monkeypatch):
    """Make getaddrinfo return exactly the given sockaddrs, in order."""

    def install(*sockaddrs):
        monkeypatch.setattr(socket, "getaddrinfo", fake_addrinfo(*sockaddrs))

    return install
