from __future__ import annotations

import logging
from dataclasses import dataclass

from .constants import DEFAULT_BACKLOG, DEFAULT_TRANSPORT, MAX_PAYLOAD


@dataclass(frozen=True, slots=True)
class DaytimeConfig:
    """Settings handed to every component at construction.

    ``progname`` names the logger, so each diagnostic carries the
    program it came from.
    """

    progname: str
    transport: str = DEFAULT_TRANSPORT
    backlog: int = DEFAULT_BACKLOG
    buffer_size: int = MAX_PAYLOAD

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(self.progname)
