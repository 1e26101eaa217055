#!/usr/bin/env python3
"""
hipcat command line.

  hipcat [-r room] [message]

With positional arguments, they are joined with single spaces and sent as one
message. Without them, each line of standard input is sent as its own message.
"""

from __future__ import annotations

import argparse
from loguru import logger
import os
import sys
import typing as t
from hipcat.hipcatConfig import ConfigResolver, ConfigMissingFieldError, HipcatError
from hipcat.hipcatNotifier import HipcatNotifier

USAGE = "hipcat [-r room] [message]"
LOG_FORMAT = "{time:YYYY/MM/DD HH:mm:ss} {message}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hipcat", usage=USAGE, description="Send messages to a HipChat room")
    parser.add_argument('-r', '--room', default=None, help='room (overrides HIPCAT_ROOM and config files)')
    parser.add_argument('message', nargs='*', help='message text; stdin is read line by line if omitted')
    return parser


def _init_logging() -> None:
    level = os.getenv("HIPCAT_LOG_LEVEL", "INFO").upper()
    logger.remove()
    try:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    except ValueError:
        logger.add(sys.stderr, level="INFO", format=LOG_FORMAT)
        logger.warning(f"Unknown HIPCAT_LOG_LEVEL {level!r}, using INFO")


def read_lines(stream: t.TextIO) -> t.Iterator[str]:
    """Yield lines without their terminators, one at a time."""
    try:
        for line in stream:
            # one terminator only: "\n" or "\r\n"
            yield line.removesuffix("\n").removesuffix("\r")
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(str(e)) from e


def main(argv: t.Sequence[str] | None = None, stdin: t.TextIO | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_intermixed_args(argv)
    _init_logging()

    try:
        cfg = ConfigResolver().resolve()
    except HipcatError as e:
        logger.error(f"Failed to load config: {e}")
        return 1

    try:
        cfg = cfg.with_room(args.room).require_room()
    except ConfigMissingFieldError as e:
        logger.error(str(e))
        print(f"Usage: {USAGE}", file=sys.stderr)
        return 1

    if args.message:
        messages: t.Iterable[str] = [" ".join(args.message)]
    else:
        messages = read_lines(stdin if stdin is not None else sys.stdin)

    with HipcatNotifier(cfg) as hn:
        try:
            hn.send_all(messages)
        except InputReadError as e:
            logger.error(f"Error reading: {e}")
            return 1
        except HipcatError as e:
            logger.error(f"Post failed: {e}")
            return 1
    return 0


def run() -> None:
    sys.exit(main())


# ------------------------------ Exceptions -------------------------------

class InputReadError(HipcatError):
    """Standard input could not be read."""


if __name__ == "__main__":
    run()
