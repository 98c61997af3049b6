from __future__ import annotations

import io
import logging
import socket

import pytest

from sctp_daytime.client import ClientSession, ClientState
from sctp_daytime.config import DaytimeConfig
from sctp_daytime.errors import ConnectError, ResolutionError

LOCAL = (0, b"2026-10-17 14:02:11\r\n")
GMT = (1, b"2026-10-17 12:02:11\r\n")


@pytest.fixture
def config():
    return DaytimeConfig(progname="daytime")


def run(config, factory, host="127.0.0.1", port="9999"):
    out = io.StringIO()
    session = ClientSession(host, port, config, out=out, socket_factory=factory)
    metrics = session.run()
    return session, metrics, out.getvalue().splitlines()


def test_prints_both_clocks_then_closes(network, config):
    net = network(records=[LOCAL, GMT])
    session, metrics, lines = run(config, net)

    assert lines == [
        "127.0.0.1:9999\t 2026-10-17 14:02:11 (local time)",
        "127.0.0.1:9999\t 2026-10-17 12:02:11 (gmt time)",
    ]
    assert (metrics.records, metrics.local, metrics.gmt, metrics.unknown) == (2, 1, 1, 0)
    assert metrics.bytes_received == 42
    assert session.state is ClientState.CLOSED
    assert net.sockets[0].close_count == 1


def test_unknown_stream_is_logged_not_printed(network, config, caplog):
    net = network(records=[(7, b"mystery\r\n"), LOCAL])
    with caplog.at_level(logging.WARNING, logger="daytime"):
        _, metrics, lines = run(config, net)

    assert "ignoring message from unknown stream 7" in caplog.text
    assert lines == ["127.0.0.1:9999\t 2026-10-17 14:02:11 (local time)"]
    assert metrics.unknown == 1


def test_stream_info_failure_is_not_fatal(network, config, caplog):
    net = network(records=[LOCAL], setsockopt_error=OSError(92, "Protocol not available"))
    _, _, lines = run(config, net)

    assert "setsockopt failed" in caplog.text
    assert len(lines) == 1


def test_receive_error_ends_loop_and_closes(network, config, caplog):
    net = network(records=[LOCAL, ConnectionResetError(104, "Connection reset by peer")])
    session, metrics, lines = run(config, net)

    assert len(lines) == 1
    assert "receive failed" in caplog.text
    assert session.state is ClientState.CLOSED
    assert net.sockets[0].close_count == 1


def test_resolution_failure_attempts_no_connection(monkeypatch, network, config):
    def boom(*args, **kwargs):
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

    monkeypatch.setattr(socket, "getaddrinfo", boom)
    net = network()
    session = ClientSession("no-such-host.invalid", "9999", config, out=io.StringIO(), socket_factory=net)

    with pytest.raises(ResolutionError):
        session.run()
    assert net.sockets == []
    assert session.state is ClientState.CLOSED


def test_connect_exhaustion_is_fatal(network, config):
    net = network()
    net.refuse.add(("127.0.0.1", 9999))
    session = ClientSession("127.0.0.1", "9999", config, out=io.StringIO(), socket_factory=net)

    with pytest.raises(ConnectError):
        session.run()
    assert session.state is ClientState.CLOSED
    assert net.sockets[0].close_count == 1


def test_peer_lookup_failure_closes_without_receiving(fake_socket, config, caplog):
    class NoPeer(fake_socket):
        def getpeername(self):
            raise OSError(107, "Transport endpoint is not connected")

    sockets = []

    def factory(family, type, proto):
        sock = NoPeer(family, type, proto, records=[LOCAL])
        sockets.append(sock)
        return sock

    _, metrics, lines = run(config, factory)

    assert lines == []
    assert metrics.records == 0
    assert sockets[0].close_count == 1
    assert len(sockets[0].records) == 1
    assert "getpeername" in caplog.text
