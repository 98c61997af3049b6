from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .constants import LINE_END, MAX_PAYLOAD, STREAM_GMT_TIME, STREAM_LOCAL_TIME, TIME_FORMAT
from .errors import ReceiveError, SendError
from .net import Connection


class DaytimeStream(enum.IntEnum):
    LOCAL_TIME = STREAM_LOCAL_TIME
    GMT_TIME = STREAM_GMT_TIME


class StreamKind(enum.Enum):
    LOCAL_TIME = "local time"
    GMT_TIME = "gmt time"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def of(cls, stream_id: int) -> "StreamKind":
        if stream_id == DaytimeStream.LOCAL_TIME:
            return cls.LOCAL_TIME
        if stream_id == DaytimeStream.GMT_TIME:
            return cls.GMT_TIME
        return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class StreamMessage:
    stream_id: int
    text: str
    length: int

    @property
    def kind(self) -> StreamKind:
        return StreamKind.of(self.stream_id)


def send_message(conn: Connection, stream_id: int, text: str) -> int:
    data = text.encode("utf-8")
    if len(data) > MAX_PAYLOAD:
        raise SendError(stream_id, len(data))
    try:
        written = conn.send_record(int(stream_id), data)
    except OSError as exc:
        raise SendError(stream_id, len(data)) from exc
    if written != len(data):
        raise SendError(stream_id, len(data), written)
    return written


def receive_message(conn: Connection, bufsize: int = MAX_PAYLOAD) -> Optional[StreamMessage]:
    """Read one record from any stream.

    Returns None once the peer has closed. A record longer than
    ``bufsize`` comes back truncated; nothing is reassembled across calls.
    """
    try:
        record = conn.recv_record(bufsize)
    except OSError as exc:
        raise ReceiveError(str(exc)) from exc
    if record is None:
        return None

    stream_id, data = record
    text = data.decode("utf-8", errors="replace")
    end = text.find(LINE_END)
    if end != -1:
        text = text[:end]
    return StreamMessage(stream_id=stream_id, text=text, length=len(data))


def format_daytime(local: bool, now: Optional[float] = None, logger: Optional[logging.Logger] = None) -> str:
    ticks = time.time() if now is None else now
    try:
        tm = time.localtime(ticks) if local else time.gmtime(ticks)
        return time.strftime(TIME_FORMAT, tm) + LINE_END
    except (OverflowError, OSError, ValueError):
        (logger or logging.getLogger(__name__)).error("localtime or gmtime failed")
        return ""
