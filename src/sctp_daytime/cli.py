from __future__ import annotations

import argparse
import sys

from .client import ClientSession
from .config import DaytimeConfig
from .constants import CLIENT_PROGNAME, DEFAULT_BACKLOG, DEFAULT_TRANSPORT, SERVER_PROGNAME
from .errors import DaytimeError
from .logs import setup_logging, syslog_logging
from .net import Acceptor
from .server import DaytimeServer
from .transport import TRANSPORTS, get_transport

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--transport", choices=sorted(TRANSPORTS), default=DEFAULT_TRANSPORT)
    p.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING")


def build_client_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=CLIENT_PROGNAME, description="SCTP daytime client.")
    p.add_argument("host")
    p.add_argument("port")
    add_common(p)
    return p


def build_server_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=SERVER_PROGNAME, description="SCTP daytime server.")
    p.add_argument("port")
    add_common(p)
    p.add_argument("--bind", default=None, help="address to listen on (default: all)")
    p.add_argument("--backlog", type=int, default=DEFAULT_BACKLOG)
    p.add_argument("--concurrent", action="store_true", help="answer each connection on its own thread")
    p.add_argument("--no-syslog", dest="syslog", action="store_false")
    return p


def client_main(argv: list[str] | None = None) -> int:
    args = build_client_parser().parse_args(argv)
    setup_logging(args.log_level)
    config = DaytimeConfig(progname=CLIENT_PROGNAME, transport=args.transport)

    try:
        ClientSession(args.host, args.port, config).run()
    except DaytimeError as exc:
        print(f"{config.progname}: {exc}", file=sys.stderr)
        return 1
    return 0


def server_main(argv: list[str] | None = None) -> int:
    args = build_server_parser().parse_args(argv)
    setup_logging(args.log_level)
    config = DaytimeConfig(progname=SERVER_PROGNAME, transport=args.transport, backlog=args.backlog)

    with syslog_logging(config.progname, enabled=args.syslog):
        try:
            acceptor = Acceptor.listening(args.port, get_transport(config.transport), config, host=args.bind)
        except DaytimeError as exc:
            print(f"{config.progname}: {exc}", file=sys.stderr)
            return 1

        with acceptor:
            try:
                DaytimeServer(acceptor, config, concurrent=args.concurrent).serve_forever()
            except KeyboardInterrupt:
                pass
    return 0


if __name__ == "__main__":
    raise SystemExit(client_main())
