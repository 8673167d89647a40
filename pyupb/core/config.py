# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.core.config.py

Per-connection configuration.

A UPBConfig is frozen once a connection starts; the network id and both
sinks never change for the lifetime of the link.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

# PIM serial line speed (fixed by the PIM)
DEFAULT_BAUDRATE = 4800

DEFAULT_RESPONSE_TIMEOUT = 10.0
DEFAULT_READ_SIZE = 64

LogSink = Callable[[str], None]
ReportSink = Callable[[bytes], Union[None, Awaitable[Any]]]


def null_log_sink(message: str) -> None:
    """Discard activity messages."""


def null_report_sink(message: bytes) -> None:
    """Discard message reports."""


@dataclass(frozen=True)
class UPBConfig:
    """
    Connection configuration.

    Attributes:
        network_id: UPB network identifier (0-255)
        log_sink: Receives formatted wire activity lines
        report_sink: Receives validated message reports (checksum stripped);
            may be a plain function or a coroutine function
        response_timeout: Seconds to wait for PK/PN/PB/PE after a transmit,
            None to wait forever
        strict_length: Discard reports whose LEN field disagrees with the
            decoded length instead of only logging them
        baudrate: Serial line speed used by open_connection()
        read_size: Maximum bytes requested per transport read
    """
    network_id: int = 0
    log_sink: LogSink = field(default=null_log_sink)
    report_sink: ReportSink = field(default=null_report_sink)
    response_timeout: Optional[float] = DEFAULT_RESPONSE_TIMEOUT
    strict_length: bool = True
    baudrate: int = DEFAULT_BAUDRATE
    read_size: int = DEFAULT_READ_SIZE

    def __post_init__(self) -> None:
        if not 0 <= self.network_id <= 0xFF:
            raise ValueError(f"Network ID must be 0-255, got {self.network_id}")
        if self.response_timeout is not None and self.response_timeout <= 0:
            raise ValueError("response_timeout must be positive or None")
        if self.read_size < 1:
            raise ValueError("read_size must be at least 1")
        if self.baudrate <= 0:
            raise ValueError("baudrate must be positive")
        # None means "use the default"
        if self.log_sink is None:
            object.__setattr__(self, "log_sink", null_log_sink)
        if self.report_sink is None:
            object.__setattr__(self, "report_sink", null_report_sink)
        logger.debug(f"Config: network=0x{self.network_id:02X}, "
                     f"response_timeout={self.response_timeout}")


DEFAULT_CONFIG = UPBConfig()
