"""SCTP daytime client and server.

A tiny time-of-day protocol carried over a multi-stream transport:
- the server sends local time on stream 0 and GMT on stream 1, then closes
- the stream id is the tag; payloads never say which clock they came from
- resolution, connection and framing live in small, testable units

Loosely modeled after RFC 867.
"""

__all__ = []
