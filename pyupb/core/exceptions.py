# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.core.exceptions.py

Exception hierarchy for the UPB driver.

Provides:
- TransportError for serial I/O failures
- ProtocolError family for PIM-level rejections returned from send()
- FrameError family for malformed inbound data (logged, never raised to callers)
- ConnectionClosedError for sends on a closed link
"""


class UPBError(Exception):
    """Base exception for all pyupb errors"""


class TransportError(UPBError):
    """Opening, reading or writing the serial stream failed"""


class ConnectionClosedError(UPBError):
    """The connection has been closed"""


class ProtocolError(UPBError):
    """The PIM rejected a transmitted command"""


class PIMBusyError(ProtocolError):
    """PIM answered PB (busy)"""


class PIMRejectedError(ProtocolError):
    """PIM answered PE (error)"""


class MissingAckError(ProtocolError):
    """An Ack Pulse was requested but the PIM reported a Nak"""


class ResponseTimeoutError(ProtocolError):
    """No terminal PIM response arrived within the response timeout"""


class FrameError(UPBError):
    """Base class for malformed inbound frames"""


class TruncatedFrameError(FrameError):
    """Stream ended with an unterminated partial frame"""


class MalformedFrameError(FrameError):
    """Frame is not a recognised PIM response"""


class MalformedHexError(FrameError):
    """Message report payload is not valid hexadecimal"""


class ShortMessageError(FrameError):
    """Message report is shorter than header plus checksum"""


class ChecksumError(FrameError):
    """Stored checksum disagrees with the computed one"""


class LengthMismatchError(FrameError):
    """LEN field disagrees with the decoded byte count"""
