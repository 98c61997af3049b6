from __future__ import annotations

import socket

STREAM_LOCAL_TIME = 0
STREAM_GMT_TIME = 1

BUFFER_SIZE = 128
MAX_PAYLOAD = BUFFER_SIZE - 1  # one byte kept for the terminator

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LINE_END = "\r\n"

DEFAULT_BACKLOG = 42
DEFAULT_TRANSPORT = "sctp"

CLIENT_PROGNAME = "daytime"
SERVER_PROGNAME = "daytimed"

# Linux SCTP socket API (netinet/sctp.h); not all exported by the socket module
IPPROTO_SCTP = getattr(socket, "IPPROTO_SCTP", 132)
SOL_SCTP = IPPROTO_SCTP
SCTP_EVENTS = 11
SCTP_SNDRCV = 1

SNDRCV_FORMAT = "=HHHxxIIIIIi"  # stream, ssn, flags, ppid, context, ttl, tsn, cumtsn, assoc_id
EVENT_SUBSCRIBE_SIZE = 10  # sctp_data_io_event is the first byte

FRAME_HEADER_FORMAT = "!HH"  # stream id, payload length
