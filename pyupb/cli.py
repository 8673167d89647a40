# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.cli.py

Command line front end.

Run with:
    pyupb --port /dev/ttyUSB0 --network 0xB4 goto 1 100
    pyupb --port /dev/ttyUSB0 --network 0xB4 send 08 10 b4 01 ff 22 64
    pyupb --port /dev/ttyUSB0 monitor
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from . import __version__
from .connection import Connection, open_connection
from .core.codec import UPBMessage, parse_hex_message
from .core.config import UPBConfig
from .core.exceptions import UPBError
from .utils import configure_logging

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/ttyUSB0"


def _byte(text: str) -> int:
    """argparse type for a byte given in decimal or 0x-hex"""
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")
    if not 0 <= value <= 0xFF:
        raise argparse.ArgumentTypeError(f"must be 0-255: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyupb",
        description="Talk to UPB devices through a serial PIM"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--port", default=DEFAULT_PORT, help="serial device file")
    parser.add_argument("--network", type=_byte, default=0, help="UPB network ID")
    parser.add_argument("--timeout", type=float, default=10.0,
                        help="seconds to wait for the PIM per command")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    sub = parser.add_subparsers(dest="command", required=True)

    goto = sub.add_parser("goto", help="set a device level")
    goto.add_argument("device", type=_byte)
    goto.add_argument("level", type=int, help="0-100")
    goto.add_argument("--rate", type=_byte, default=None, help="fade rate")

    report = sub.add_parser("report", help="ask a device to report its state")
    report.add_argument("device", type=_byte)

    send = sub.add_parser("send", help="send a raw message (hex, no checksum)")
    send.add_argument("message", nargs="+", help='e.g. "08 10 b4 01 ff 22 64"')

    sub.add_parser("monitor", help="print message reports until interrupted")
    return parser


def print_report(message: bytes) -> None:
    print(f"{message.hex()}  {UPBMessage.from_bytes(message)}", flush=True)


async def run_command(conn: Connection, args: argparse.Namespace) -> None:
    if args.command == "goto":
        await conn.goto_level(args.device, args.level, rate=args.rate)
    elif args.command == "report":
        await conn.report_state(args.device)
    elif args.command == "send":
        await conn.send(parse_hex_message(" ".join(args.message)))
    elif args.command == "monitor":
        # Runs until cancelled
        await asyncio.Event().wait()


async def _main(args: argparse.Namespace) -> None:
    config = UPBConfig(
        network_id=args.network,
        log_sink=logger.info,
        report_sink=print_report,
        response_timeout=args.timeout,
    )
    conn = await open_connection(args.port, config)
    async with conn:
        await run_command(conn, args)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        asyncio.run(_main(args))
    except KeyboardInterrupt:
        return 0
    except (UPBError, ValueError) as e:
        print(f"pyupb: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
