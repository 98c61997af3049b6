from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Any, Tuple

from .errors import ResolutionError


@dataclass(frozen=True, slots=True)
class AddressCandidate:
    family: socket.AddressFamily
    socktype: int
    proto: int
    sockaddr: Tuple[Any, ...]

    @property
    def host(self) -> str:
        return str(self.sockaddr[0])

    @property
    def port(self) -> int:
        return int(self.sockaddr[1])


def resolve(host: str | None, port: str | int, *, passive: bool = False) -> list[AddressCandidate]:
    """Resolve ``host``/``port`` into candidates for every address family.

    Passive mode asks for wildcard bind addresses (``host`` is normally
    ``None``); active mode asks for the addresses of a remote host. The
    order is the resolver's, which already reflects dual-stack preference.
    """
    flags = socket.AI_PASSIVE if passive else 0
    try:
        infos = socket.getaddrinfo(host, str(port), socket.AF_UNSPEC, socket.SOCK_STREAM, 0, flags)
    except socket.gaierror as exc:
        raise ResolutionError(exc.strerror or str(exc)) from exc

    candidates = [
        AddressCandidate(family=family, socktype=socktype, proto=proto, sockaddr=tuple(sockaddr))
        for family, socktype, proto, _canonname, sockaddr in infos
    ]
    if not candidates:
        raise ResolutionError(f"no addresses for {host or '*'} port {port}")
    return candidates
