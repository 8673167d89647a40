# pyupb/core/__init__.py
"""
pyupb Core Module - UPB protocol engine

Contains:
- Packet checksum and message encoding/decoding
- PIM receive framing and response classification
- Single-in-flight request/response session

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

from .codec import (
    UPBMessage,
    PIMCommand,
    DeviceCommand,
    checksum,
    is_valid_checksum,
    build_message,
    encode_transmit,
    decode_report,
    parse_hex_message,
    scale_level,
)

from .framing import (
    PIMResponse,
    scan_frame,
    iter_frames,
    classify_frame,
)

from .session import (
    UPBSession,
    SessionState,
    Request,
)

from .config import UPBConfig, DEFAULT_CONFIG

from .exceptions import (
    UPBError,
    TransportError,
    ConnectionClosedError,
    ProtocolError,
    PIMBusyError,
    PIMRejectedError,
    MissingAckError,
    ResponseTimeoutError,
    FrameError,
    TruncatedFrameError,
    MalformedFrameError,
    MalformedHexError,
    ShortMessageError,
    ChecksumError,
    LengthMismatchError,
)

__all__ = [
    # Codec
    'UPBMessage',
    'PIMCommand',
    'DeviceCommand',
    'checksum',
    'is_valid_checksum',
    'build_message',
    'encode_transmit',
    'decode_report',
    'parse_hex_message',
    'scale_level',

    # Framing
    'PIMResponse',
    'scan_frame',
    'iter_frames',
    'classify_frame',

    # Session
    'UPBSession',
    'SessionState',
    'Request',
    'UPBConfig',
    'DEFAULT_CONFIG',

    # Exceptions
    'UPBError',
    'TransportError',
    'ConnectionClosedError',
    'ProtocolError',
    'PIMBusyError',
    'PIMRejectedError',
    'MissingAckError',
    'ResponseTimeoutError',
    'FrameError',
    'TruncatedFrameError',
    'MalformedFrameError',
    'MalformedHexError',
    'ShortMessageError',
    'ChecksumError',
    'LengthMismatchError',
]
