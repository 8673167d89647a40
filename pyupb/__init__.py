# pyupb/__init__.py
"""
pyupb - UPB (Universal Powerline Bus) driver for serial PIMs

Provides:
- UPB packet encoding/decoding and checksums
- PIM framing and response handling
- An asyncio connection serializing commands over one serial link

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""

__version__ = "0.1.0"

# Core protocol
from .core.codec import (
    UPBMessage,
    DeviceCommand,
    PIMCommand,
    checksum,
    is_valid_checksum,
    build_message,
    parse_hex_message,
    scale_level,
)
from .core.config import UPBConfig
from .core.session import SessionState

# Public API
from .connection import (
    Connection,
    connect,
    open_connection,
)

# Transports
from .interfaces.transport import (
    BaseTransport,
    SerialTransport,
)

# Exceptions
from .core.exceptions import (
    UPBError,
    TransportError,
    ConnectionClosedError,
    ProtocolError,
    PIMBusyError,
    PIMRejectedError,
    MissingAckError,
    ResponseTimeoutError,
    FrameError,
)

# Utilities
from .utils import configure_logging

__all__ = [
    # Core
    'UPBMessage',
    'DeviceCommand',
    'PIMCommand',
    'checksum',
    'is_valid_checksum',
    'build_message',
    'parse_hex_message',
    'scale_level',
    'UPBConfig',
    'SessionState',

    # API
    'Connection',
    'connect',
    'open_connection',

    # Transports
    'BaseTransport',
    'SerialTransport',

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

    # Utilities
    'configure_logging',
    'get_version',

    # Metadata
    '__version__'
]

def get_version() -> str:
    """Return the package version."""
    return __version__
