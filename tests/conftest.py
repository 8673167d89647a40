# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
tests/conftest.py

Common fixtures:
- FakeTransport: thread-safe in-memory PIM link with an optional responder
- helpers to build PU reports and unpack transmitted messages
"""

import asyncio
import binascii
import logging
import threading
from typing import Callable, List, Optional

import pytest

from pyupb.core.codec import checksum
from pyupb.core.exceptions import TransportError
from pyupb.interfaces.transport import BaseTransport

ACK_REPLY = b"PA\rPK\r"


class FakeTransport(BaseTransport):
    """
    In-memory transport.

    feed() queues bytes for read(); end() signals end-of-stream; fail_read()
    makes the next read raise. Each write is recorded and, when a responder
    is set, its return value is fed back.
    """

    def __init__(self, responder: Optional[Callable[[bytes], bytes]] = None):
        self.responder = responder
        self.written: List[bytes] = []
        self.fail_writes = False
        self._buffer = bytearray()
        self._read_errors: List[Exception] = []
        self._eof = False
        self._open = True
        self._cond = threading.Condition()

    @property
    def is_open(self) -> bool:
        return self._open

    def feed(self, data: bytes) -> None:
        with self._cond:
            self._buffer.extend(data)
            self._cond.notify_all()

    def end(self) -> None:
        with self._cond:
            self._eof = True
            self._cond.notify_all()

    def fail_read(self, error: Exception) -> None:
        with self._cond:
            self._read_errors.append(error)
            self._cond.notify_all()

    def read(self, size: int) -> bytes:
        with self._cond:
            while (not self._buffer and not self._eof and self._open
                   and not self._read_errors):
                self._cond.wait()
            if self._read_errors:
                raise self._read_errors.pop(0)
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
            return data

    def write(self, data: bytes) -> None:
        if self.fail_writes:
            raise TransportError("write failed")
        if not self._open:
            raise TransportError("closed")
        with self._cond:
            self.written.append(data)
        if self.responder is not None:
            reply = self.responder(data)
            if reply:
                self.feed(reply)

    def close(self) -> None:
        with self._cond:
            self._open = False
            self._cond.notify_all()

    @property
    def messages(self) -> List[bytes]:
        """Transmitted messages without command byte, checksum and CR"""
        return [wire_message(w) for w in self.written]


def wire_message(wire: bytes) -> bytes:
    return binascii.unhexlify(wire[1:-1])[:-1]


def make_report(message: bytes) -> bytes:
    """Encode message bytes as a PU frame, checksum included."""
    body = (message + bytes([checksum(message)])).hex().upper()
    return b"PU" + body.encode("ascii") + b"\r"


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for all tests"""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    yield


@pytest.fixture
def transport() -> FakeTransport:
    """Transport whose PIM accepts and acks every message"""
    return FakeTransport(responder=lambda wire: ACK_REPLY)


@pytest.fixture
def silent_transport() -> FakeTransport:
    """Transport whose PIM never answers on its own"""
    return FakeTransport()


def pytest_configure(config: pytest.Config) -> None:
    """Pytest configuration hook"""
    config.addinivalue_line(
        "markers",
        "hardware: mark test that requires an actual PIM"
    )
