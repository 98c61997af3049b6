from __future__ import annotations

import contextlib
import logging
import logging.handlers
import os
from typing import Iterator, Optional

LOG_FORMAT = "%(name)s: %(message)s"
SYSLOG_ADDRESS = "/dev/log"


def setup_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)


@contextlib.contextmanager
def syslog_logging(progname: str, enabled: bool = True, address: str = SYSLOG_ADDRESS) -> Iterator[Optional[logging.Handler]]:
    """Send the program's log records to syslog (LOG_DAEMON) for the duration of the block."""
    if not enabled:
        yield None
        return

    logger = logging.getLogger(progname)
    if not os.path.exists(address):
        logger.warning("syslog unavailable at %s", address)
        yield None
        return
    try:
        handler = logging.handlers.SysLogHandler(
            address=address,
            facility=logging.handlers.SysLogHandler.LOG_DAEMON,
        )
    except OSError as exc:
        logger.warning("syslog unavailable at %s: %s", address, exc)
        yield None
        return

    handler.ident = f"{progname}[{os.getpid()}]: "
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        handler.close()
