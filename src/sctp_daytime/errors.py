from __future__ import annotations


class DaytimeError(Exception):
    pass


class ResolutionError(DaytimeError):
    def __init__(self, reason: str):
        super().__init__(f"getaddrinfo: {reason}")
        self.reason = reason


class ConnectError(DaytimeError):
    def __init__(self, host: str, port: str):
        super().__init__(f"socket or connect: failed for {host} port {port}")
        self.host = host
        self.port = port


class BindError(DaytimeError):
    def __init__(self, port: str, reason: str | None = None):
        msg = f"bind failed for port {port}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.port = port
        self.reason = reason


class SendError(DaytimeError):
    def __init__(self, stream_id: int, expected: int, written: int | None = None):
        super().__init__(
            f"send on stream {stream_id} wrote {written if written is not None else 'nothing'} "
            f"of {expected} bytes"
        )
        self.stream_id = stream_id
        self.expected = expected
        self.written = written


class ReceiveError(DaytimeError):
    pass
