from __future__ import annotations

import socket
import struct
from typing import Optional, Tuple, Union

from .constants import (
    EVENT_SUBSCRIBE_SIZE,
    FRAME_HEADER_FORMAT,
    IPPROTO_SCTP,
    SCTP_EVENTS,
    SCTP_SNDRCV,
    SNDRCV_FORMAT,
    SOL_SCTP,
)

SNDRCV = struct.Struct(SNDRCV_FORMAT)
FRAME_HEADER = struct.Struct(FRAME_HEADER_FORMAT)

Record = Tuple[int, bytes]


class SctpTransport:
    """One-to-one SCTP socket; the stream id travels in SCTP_SNDRCV ancillary data."""

    name = "sctp"
    socktype = socket.SOCK_STREAM
    proto = IPPROTO_SCTP

    def enable_stream_info(self, sock: socket.socket) -> None:
        events = bytes([1]) + bytes(EVENT_SUBSCRIBE_SIZE - 1)
        sock.setsockopt(SOL_SCTP, SCTP_EVENTS, events)

    def send(self, sock: socket.socket, stream_id: int, data: bytes) -> int:
        info = SNDRCV.pack(stream_id, 0, 0, 0, 0, 0, 0, 0, 0)
        return sock.sendmsg([data], [(SOL_SCTP, SCTP_SNDRCV, info)])

    def recv(self, sock: socket.socket, bufsize: int) -> Optional[Record]:
        data, ancdata, _flags, _addr = sock.recvmsg(bufsize, socket.CMSG_SPACE(SNDRCV.size))
        if not data:
            return None

        # without stream info enabled the kernel sends no SNDRCV and everything reads as stream 0
        stream_id = 0
        for level, kind, cdata in ancdata:
            if level == SOL_SCTP and kind == SCTP_SNDRCV and len(cdata) >= SNDRCV.size:
                stream_id = SNDRCV.unpack_from(cdata)[0]
        return stream_id, data


class FramedTcpTransport:
    """Two ordered substreams emulated over TCP with a (stream, length) header per record."""

    name = "tcp"
    socktype = socket.SOCK_STREAM
    proto = socket.IPPROTO_TCP

    def enable_stream_info(self, sock: socket.socket) -> None:
        pass

    def send(self, sock: socket.socket, stream_id: int, data: bytes) -> int:
        sent = sock.send(FRAME_HEADER.pack(stream_id, len(data)) + data)
        return max(0, sent - FRAME_HEADER.size)

    def recv(self, sock: socket.socket, bufsize: int) -> Optional[Record]:
        header = _recv_exact(sock, FRAME_HEADER.size)
        if not header:
            return None
        if len(header) < FRAME_HEADER.size:
            raise ConnectionError("connection closed inside a frame header")

        stream_id, length = FRAME_HEADER.unpack(header)
        payload = _recv_exact(sock, length)
        if len(payload) < length:
            raise ConnectionError(f"connection closed after {len(payload)} of {length} payload bytes")
        # truncate like a short SCTP read; the rest of this frame is dropped
        return stream_id, payload[:bufsize]


def _recv_exact(sock: socket.socket, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = sock.recv(n - len(buf))
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


Transport = Union[SctpTransport, FramedTcpTransport]

TRANSPORTS: dict[str, Transport] = {
    SctpTransport.name: SctpTransport(),
    FramedTcpTransport.name: FramedTcpTransport(),
}


def get_transport(name: str) -> Transport:
    try:
        return TRANSPORTS[name]
    except KeyError:
        raise ValueError(f"unknown transport {name!r}; expected one of {sorted(TRANSPORTS)}") from None
