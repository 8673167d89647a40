# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.core.codec.py

UPB packet encoding/decoding.

Handles:
- Packet checksum calculation and verification
- Message header construction
- PIM "Transmit UPB Message" wire encoding
- Message report (PU) decoding and validation

See "UPB Powerline Interface Module (PIM) Description", sections 6 and 7,
and "UPB System Description" for the packet layout.
"""

from __future__ import annotations

import binascii
import logging
from dataclasses import dataclass
from enum import IntEnum

from .exceptions import (
    ChecksumError,
    LengthMismatchError,
    MalformedHexError,
    ShortMessageError,
)

logger = logging.getLogger(__name__)

# Packet header layout
HEADER_LEN = 6
CHECKSUM_LEN = 1
MIN_REPORT_LEN = HEADER_LEN + CHECKSUM_LEN
MAX_ARGS = 18

HOST_SOURCE_ID = 0xFF

# LEN byte
LEN_MASK = 0x1F
LINK_BIT = 0x80

# CONTROL byte
ACK_PULSE_BIT = 0x10
RETRANSMIT_MASK = 0x03

CR = b"\r"


class PIMCommand(IntEnum):
    """Host-to-PIM command bytes (PIM description 6.3)"""
    READ_REGISTERS = 0x12
    TRANSMIT = 0x14
    WRITE_REGISTERS = 0x17


class DeviceCommand(IntEnum):
    """UPB message data ids used by this driver"""
    ACTIVATE = 0x20
    DEACTIVATE = 0x21
    GOTO = 0x22
    REPORT_STATE = 0x30
    DEVICE_STATE = 0x86


def checksum(data: bytes) -> int:
    """
    Compute a UPB packet checksum.

    Sum all bytes of the packet header and message fields, take the two's
    complement of the sum and truncate it to 8 bits.
    """
    return -sum(data) & 0xFF


def is_valid_checksum(data: bytes) -> bool:
    """Return True if the last byte of data is the checksum of the rest."""
    if not data:
        return False
    return checksum(data[:-1]) == data[-1]


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be 0-255, got {value}")


def build_message(
    network: int,
    destination: int,
    command: int,
    args: bytes = b"",
    ack_pulse: bool = True
) -> bytes:
    """
    Build a UPB message (header plus arguments, no checksum).

    Args:
        network: Network ID
        destination: Destination device ID
        command: Message data ID
        args: Command arguments
        ack_pulse: Request an Ack Pulse from the destination

    Raises:
        ValueError: On out-of-range ids or too many arguments
    """
    _check_byte("network", network)
    _check_byte("destination", destination)
    _check_byte("command", command)
    args = bytes(args)
    if len(args) > MAX_ARGS:
        raise ValueError(f"At most {MAX_ARGS} arguments allowed, got {len(args)}")

    control = ACK_PULSE_BIT if ack_pulse else 0x00
    header = bytes([
        HEADER_LEN + len(args) + CHECKSUM_LEN,
        control,
        network,
        destination,
        HOST_SOURCE_ID,
        command,
    ])
    return header + args


def encode_transmit(message: bytes) -> bytes:
    """
    Encode a message as a PIM "Transmit UPB Message" command.

    The command byte is sent raw, followed by the message and its checksum
    as uppercase hex digits and a carriage return.
    """
    message = bytes(message)
    body = (message + bytes([checksum(message)])).hex().upper()
    return bytes([PIMCommand.TRANSMIT]) + body.encode("ascii") + CR


def decode_report(payload: str, strict_length: bool = True) -> bytes:
    """
    Decode the hex payload of a PU message report.

    Args:
        payload: Hex digits following the "PU" prefix
        strict_length: Raise on a LEN field that disagrees with the decoded
            length instead of logging a warning

    Returns:
        Message bytes with the checksum removed

    Raises:
        MalformedHexError, ShortMessageError, ChecksumError, LengthMismatchError
    """
    try:
        data = binascii.unhexlify(payload)
    except (binascii.Error, ValueError) as e:
        raise MalformedHexError(f"Bad hex in message report: {payload!r}") from e

    if len(data) < MIN_REPORT_LEN:
        raise ShortMessageError(f"Message report too short: {len(data)} bytes")

    declared = data[0] & LEN_MASK
    if declared != len(data):
        if strict_length:
            raise LengthMismatchError(
                f"LEN field says {declared} bytes, got {len(data)}"
            )
        logger.warning(f"Inconsistent message length: LEN={declared}, "
                       f"actual={len(data)}")

    if not is_valid_checksum(data):
        raise ChecksumError(
            f"Bad checksum: got 0x{data[-1]:02X}, "
            f"expected 0x{checksum(data[:-1]):02X}"
        )
    return data[:-1]


def parse_hex_message(text: str) -> bytes:
    """
    Parse an operator-entered message such as "08 10 b4 01 ff 22 64".

    Whitespace is ignored. No checksum is expected.
    """
    digits = "".join(text.split())
    try:
        return binascii.unhexlify(digits)
    except (binascii.Error, ValueError) as e:
        raise MalformedHexError(f"Bad hex message: {text!r}") from e


def scale_level(value: int, maximum: int = 0xFF) -> int:
    """Round a 0..maximum brightness onto the 0..100 UPB level range."""
    if not 0 <= value <= maximum:
        raise ValueError(f"Value must be 0-{maximum}, got {value}")
    return (value * 100 + (maximum + 1) // 2) // (maximum + 1)


@dataclass(frozen=True)
class UPBMessage:
    """Parsed view of a UPB message (without checksum)"""
    length: int
    control: int
    network: int
    destination: int
    source: int
    command: int
    args: bytes = b""
    link: bool = False

    @property
    def ack_requested(self) -> bool:
        return bool(self.control & ACK_PULSE_BIT)

    @property
    def retransmit_count(self) -> int:
        return self.control & RETRANSMIT_MASK

    @property
    def is_link(self) -> bool:
        return self.link

    @classmethod
    def from_bytes(cls, data: bytes) -> "UPBMessage":
        """Parse message bytes as delivered to a report sink."""
        if len(data) < HEADER_LEN:
            raise ShortMessageError(f"Message too short: {len(data)} bytes")
        return cls(
            length=data[0] & LEN_MASK,
            control=data[1],
            network=data[2],
            destination=data[3],
            source=data[4],
            command=data[5],
            args=bytes(data[HEADER_LEN:]),
            link=bool(data[0] & LINK_BIT),
        )

    def to_bytes(self) -> bytes:
        first = (self.length & LEN_MASK) | (LINK_BIT if self.link else 0)
        return bytes([first, self.control, self.network, self.destination,
                      self.source, self.command]) + self.args

    def __str__(self) -> str:
        kind = "link" if self.link else "device"
        return (f"UPBMessage({kind} net=0x{self.network:02X} "
                f"dst=0x{self.destination:02X} src=0x{self.source:02X} "
                f"cmd=0x{self.command:02X} args={self.args.hex()})")
