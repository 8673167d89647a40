# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.core.framing.py

PIM receive framing.

The PIM talks ASCII: every response is a token terminated by a carriage
return. This module splits the raw byte stream into those tokens and
classifies them by their two-character prefix.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Optional, Tuple

from .exceptions import MalformedFrameError, TruncatedFrameError

logger = logging.getLogger(__name__)

DELIMITER = 0x0D


class PIMResponse(Enum):
    """PIM-to-host response codes (PIM description 6.4)"""
    ACCEPT = "PA"
    BUSY = "PB"
    ERROR = "PE"
    ACK = "PK"
    NAK = "PN"
    REPORT = "PU"


_RESPONSES = {r.value: r for r in PIMResponse}


def scan_frame(data: bytes, at_eof: bool) -> Tuple[int, Optional[bytes]]:
    """
    Find the next complete frame in a receive buffer.

    Args:
        data: Buffered bytes
        at_eof: No more bytes will arrive

    Returns:
        (advance, frame): bytes to consume and the frame without its
        delimiter; (0, None) when more data is needed

    Raises:
        TruncatedFrameError: at_eof with an unterminated partial frame
    """
    i = data.find(bytes([DELIMITER]))
    if i >= 0:
        return i + 1, bytes(data[:i])
    if at_eof and data:
        raise TruncatedFrameError(f"Stream ended inside a frame: {bytes(data)!r}")
    return 0, None


async def iter_frames(read: Callable[[], Awaitable[bytes]]) -> AsyncIterator[str]:
    """
    Yield CR-delimited frames from a byte stream.

    Args:
        read: Coroutine function returning the next chunk; b"" marks the
            end of the stream

    Yields:
        Frame text with the delimiter stripped

    Raises:
        TruncatedFrameError: Stream ended with a partial frame buffered
    """
    buffer = bytearray()
    at_eof = False
    while True:
        advance, frame = scan_frame(buffer, at_eof)
        if frame is not None:
            del buffer[:advance]
            yield frame.decode("ascii", errors="replace")
            continue
        if at_eof:
            return
        chunk = await read()
        if not chunk:
            at_eof = True
        else:
            buffer.extend(chunk)


def classify_frame(text: str) -> Tuple[PIMResponse, str]:
    """
    Classify a PIM frame.

    Returns:
        (response, payload) where payload is whatever follows the
        two-character code (the hex digits of a PU report)

    Raises:
        MalformedFrameError: Not a known PIM response
    """
    if len(text) < 2 or text[0] != "P":
        raise MalformedFrameError(f"Not a PIM response: {text!r}")
    response = _RESPONSES.get(text[:2])
    if response is None:
        raise MalformedFrameError(f"Unknown PIM response: {text!r}")
    return response, text[2:]
