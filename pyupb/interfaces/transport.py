# pyupb/interfaces/transport.py
"""
Transport Interfaces

Defines the blocking byte-stream contract the session drives, and the
pyserial implementation used to reach a PIM.

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

import serial

from ..core.config import DEFAULT_BAUDRATE
from ..core.exceptions import TransportError

logger = logging.getLogger(__name__)

class BaseTransport(ABC):
    """
    Abstract blocking byte stream.

    read() and write() are called from worker threads, never concurrently
    with themselves. close() may be called from any thread and must make a
    blocked read() return.
    """

    @abstractmethod
    def read(self, size: int) -> bytes:
        """
        Read up to size bytes, blocking until at least one is available.

        Returns:
            Received bytes; b"" once the stream has ended or been closed

        Raises:
            TransportError: On I/O failure
        """

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write all of data.

        Raises:
            TransportError: On I/O failure or when closed
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying device"""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True until close() is called"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(open={self.is_open})"

class SerialTransport(BaseTransport):
    """
    Serial port transport for a PIM.

    Args:
        port: Device path (e.g. /dev/ttyUSB0, COM3)
        baudrate: Line speed (the PIM runs at 4800)
        timeout: Poll interval for reads; read() keeps polling until data
            arrives or the port is closed
        serial_port: Already-open pyserial port to wrap instead of opening
    """

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = 1.0,
        serial_port: Optional[serial.Serial] = None
    ):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._closed = threading.Event()
        if serial_port is not None:
            self._serial = serial_port
            return
        try:
            self._serial = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=timeout
            )
            logger.info(f"Opened serial port {port}@{baudrate}")
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Serial open failed: {e}") from e

    @property
    def is_open(self) -> bool:
        return not self._closed.is_set() and self._serial.is_open

    def read(self, size: int) -> bytes:
        while not self._closed.is_set():
            try:
                data = self._serial.read(min(self._serial.in_waiting or 1, size))
            except (serial.SerialException, OSError, TypeError) as e:
                # pyserial raises from a port closed underneath the read
                if self._closed.is_set():
                    break
                raise TransportError(f"Serial read failed: {e}") from e
            if data:
                return data
        return b''

    def write(self, data: bytes) -> None:
        if self._closed.is_set():
            raise TransportError("Serial port closed")
        try:
            self._serial.write(data)
            self._serial.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Serial write failed: {e}") from e

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        try:
            if hasattr(self._serial, 'cancel_read'):
                self._serial.cancel_read()
        except (serial.SerialException, OSError) as e:
            logger.debug(f"cancel_read failed: {e}")
        self._serial.close()
        logger.info(f"Closed serial port {self.port}")

    def __repr__(self) -> str:
        return f"SerialTransport(port={self.port!r}, baudrate={self.baudrate})"
