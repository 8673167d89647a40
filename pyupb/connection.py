# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.connection.py

Public API for talking to UPB devices through a PIM.

Example:
    async def main():
        conn = await open_connection("/dev/ttyUSB0", UPBConfig(network_id=0xB4))
        async with conn:
            await conn.goto_level(0x01, 100)
"""

from __future__ import annotations

import logging
from typing import Optional

import async_timeout

from .core.codec import DeviceCommand, build_message
from .core.config import UPBConfig
from .core.session import SessionState, UPBSession
from .interfaces.transport import BaseTransport, SerialTransport
from .utils.async_thread import run_in_thread

logger = logging.getLogger(__name__)

MAX_LEVEL = 100


class Connection:
    """
    A live link to one PIM.

    Created by connect() or open_connection(); owns the transport and the
    background tasks until close().
    """

    def __init__(self, transport: BaseTransport, config: UPBConfig) -> None:
        self.config = config
        self._session = UPBSession(transport, config)

    @property
    def network_id(self) -> int:
        return self.config.network_id

    @property
    def closed(self) -> bool:
        return self._session.closed

    @property
    def state(self) -> SessionState:
        return self._session.state

    def _start(self) -> None:
        self._session.start()

    async def send(self, message: bytes, timeout: Optional[float] = None) -> None:
        """
        Transmit a message and wait for the PIM's verdict.

        Args:
            message: UPB message without checksum
            timeout: Seconds to wait before giving up (None waits for the
                session's own response timeout)

        Raises:
            ConnectionClosedError: The connection is closed
            PIMBusyError, PIMRejectedError, MissingAckError,
            ResponseTimeoutError: The PIM rejected or never answered
            TransportError: The write failed
            asyncio.TimeoutError: timeout elapsed first
        """
        future = self._session.submit(message)
        if timeout is None:
            await future
            return
        async with async_timeout.timeout(timeout):
            await future

    def build_message(self, destination: int, command: int, args: bytes = b"") -> bytes:
        """Build a message for this connection's network."""
        return build_message(self.config.network_id, destination, command, args)

    async def goto_level(
        self,
        device_id: int,
        level: int,
        rate: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> None:
        """
        Send the Goto command (UPB 11.1.3).

        Args:
            device_id: Destination device
            level: 0-100 percent
            rate: Optional fade rate argument
        """
        if not 0 <= level <= MAX_LEVEL:
            raise ValueError(f"Level must be 0-{MAX_LEVEL}, got {level}")
        args = bytes([level]) if rate is None else bytes([level, rate])
        await self.send(self.build_message(device_id, DeviceCommand.GOTO, args), timeout)

    async def report_state(self, device_id: int, timeout: Optional[float] = None) -> None:
        """Send the Report State command (UPB 11.1.9)."""
        await self.send(self.build_message(device_id, DeviceCommand.REPORT_STATE), timeout)

    async def close(self) -> None:
        """Close the link. Safe to call more than once."""
        await self._session.close()

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (f"Connection(network=0x{self.config.network_id:02X}, "
                f"state={self.state.name}, closed={self.closed})")


async def connect(transport: BaseTransport, config: Optional[UPBConfig] = None) -> Connection:
    """
    Take ownership of an open transport and start talking to the PIM.

    Must be awaited from the event loop that will drive the connection.
    """
    conn = Connection(transport, config or UPBConfig())
    conn._start()
    return conn


async def open_connection(port: str, config: Optional[UPBConfig] = None) -> Connection:
    """
    Open a serial PIM and connect to it.

    Raises:
        TransportError: The device could not be opened
    """
    config = config or UPBConfig()
    transport = await run_in_thread(SerialTransport, port, baudrate=config.baudrate)
    logger.info(f"PIM on {port}, network 0x{config.network_id:02X}")
    return await connect(transport, config)
