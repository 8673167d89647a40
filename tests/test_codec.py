# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
tests/test_codec.py

Unit tests for UPB packet encoding/decoding.

Covers:
- Checksum calculation and single-bit corruption detection
- Message header construction and argument validation
- Transmit command encoding
- Message report decoding and its error cases
- Operator hex parsing and level scaling
"""

import logging

import pytest

from pyupb.core.codec import (
    UPBMessage,
    build_message,
    checksum,
    decode_report,
    encode_transmit,
    is_valid_checksum,
    parse_hex_message,
    scale_level,
)
from pyupb.core.exceptions import (
    ChecksumError,
    LengthMismatchError,
    MalformedHexError,
    ShortMessageError,
)

GOTO_100 = bytes([0x08, 0x10, 0xB4, 0x01, 0xFF, 0x22, 0x64])
DEVICE_STATE = bytes([0x08, 0x00, 0xB4, 0xFF, 0x0B, 0x86, 0x64])


def with_checksum(message: bytes) -> bytes:
    return message + bytes([checksum(message)])


class TestChecksum:
    def test_known_value(self):
        assert checksum(GOTO_100) == 0xAE

    def test_empty(self):
        assert checksum(b"") == 0x00

    def test_sum_wraps_to_zero(self):
        assert (sum(with_checksum(GOTO_100)) & 0xFF) == 0

    @pytest.mark.parametrize("message", [
        GOTO_100,
        DEVICE_STATE,
        bytes([0x07, 0x10, 0xB4, 0x0B, 0xFF, 0x30]),
        bytes(range(18)),
        b"\xff" * 10,
    ])
    def test_valid_and_single_bit_flips(self, message):
        packet = with_checksum(message)
        assert is_valid_checksum(packet)
        for index in range(len(packet)):
            for bit in range(8):
                corrupt = bytearray(packet)
                corrupt[index] ^= 1 << bit
                assert not is_valid_checksum(bytes(corrupt)), (index, bit)

    def test_empty_packet_invalid(self):
        assert not is_valid_checksum(b"")


class TestBuildMessage:
    def test_goto_header(self):
        assert build_message(0xB4, 0x01, 0x22, bytes([0x64])) == GOTO_100

    def test_no_args(self):
        assert build_message(0xB4, 0x0B, 0x30) == bytes([0x07, 0x10, 0xB4, 0x0B, 0xFF, 0x30])

    def test_without_ack_pulse(self):
        assert build_message(0xB4, 0x01, 0x22, b"\x00", ack_pulse=False)[1] == 0x00

    def test_too_many_args(self):
        with pytest.raises(ValueError):
            build_message(0xB4, 0x01, 0x22, bytes(19))

    @pytest.mark.parametrize("network,dest,cmd", [
        (256, 1, 0x22),
        (0xB4, -1, 0x22),
        (0xB4, 1, 0x100),
    ])
    def test_out_of_range(self, network, dest, cmd):
        with pytest.raises(ValueError):
            build_message(network, dest, cmd)


class TestEncodeTransmit:
    def test_wire_format(self):
        assert encode_transmit(GOTO_100) == b"\x140810B401FF2264AE\r"

    def test_uppercase_hex(self):
        wire = encode_transmit(bytes([0x07, 0x10, 0xab, 0xcd, 0xff, 0x30]))
        body = wire[1:-1]
        assert body == body.upper()


class TestDecodeReport:
    def test_valid_report_strips_checksum(self):
        payload = with_checksum(DEVICE_STATE).hex().upper()
        assert decode_report(payload) == DEVICE_STATE

    def test_lowercase_hex_accepted(self):
        assert decode_report(with_checksum(DEVICE_STATE).hex()) == DEVICE_STATE

    @pytest.mark.parametrize("payload", ["ZZ", "081", "08 10"])
    def test_malformed_hex(self, payload):
        with pytest.raises(MalformedHexError):
            decode_report(payload)

    def test_short_message(self):
        with pytest.raises(ShortMessageError):
            decode_report(with_checksum(bytes([0x07, 0x00, 0xB4, 0xFF, 0x0B])).hex())

    def test_bad_checksum(self):
        packet = bytearray(with_checksum(DEVICE_STATE))
        packet[-1] ^= 0x01
        with pytest.raises(ChecksumError):
            decode_report(packet.hex())

    def test_length_mismatch_strict(self):
        message = bytes([0x09]) + DEVICE_STATE[1:]
        with pytest.raises(LengthMismatchError):
            decode_report(with_checksum(message).hex())

    def test_length_mismatch_lenient(self, caplog):
        message = bytes([0x09]) + DEVICE_STATE[1:]
        with caplog.at_level(logging.WARNING, logger="pyupb.core.codec"):
            assert decode_report(with_checksum(message).hex(), strict_length=False) == message
        assert "Inconsistent message length" in caplog.text

    def test_link_bit_ignored_for_length(self):
        message = bytes([0x88]) + DEVICE_STATE[1:]
        assert decode_report(with_checksum(message).hex()) == message


class TestHelpers:
    def test_parse_hex_message_with_spaces(self):
        assert parse_hex_message("08 10 b4 01 ff 22 64") == GOTO_100

    def test_parse_hex_message_bad(self):
        with pytest.raises(MalformedHexError):
            parse_hex_message("08 1g")

    @pytest.mark.parametrize("value,level", [
        (0, 0),
        (1, 0),
        (128, 50),
        (255, 100),
    ])
    def test_scale_level(self, value, level):
        assert scale_level(value) == level

    def test_scale_level_out_of_range(self):
        with pytest.raises(ValueError):
            scale_level(256)


class TestUPBMessage:
    def test_from_bytes(self):
        msg = UPBMessage.from_bytes(DEVICE_STATE)
        assert msg.length == 8
        assert msg.network == 0xB4
        assert msg.destination == 0xFF
        assert msg.source == 0x0B
        assert msg.command == 0x86
        assert msg.args == b"\x64"
        assert not msg.ack_requested
        assert msg.retransmit_count == 0
        assert not msg.is_link

    def test_link_packet(self):
        msg = UPBMessage.from_bytes(bytes([0x87, 0x10, 0xB4, 0x0B, 0x01, 0x20]))
        assert msg.is_link
        assert msg.ack_requested
        assert msg.to_bytes() == bytes([0x87, 0x10, 0xB4, 0x0B, 0x01, 0x20])

    def test_too_short(self):
        with pytest.raises(ShortMessageError):
            UPBMessage.from_bytes(b"\x07\x10")
