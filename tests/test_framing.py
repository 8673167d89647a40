# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
tests/test_framing.py

Unit tests for PIM receive framing.

Covers:
- scan_frame buffer handling and end-of-stream rules
- iter_frames across chunk boundaries
- Response classification
"""

import pytest

from pyupb.core.exceptions import MalformedFrameError, TruncatedFrameError
from pyupb.core.framing import PIMResponse, classify_frame, iter_frames, scan_frame


def reader(*chunks: bytes):
    """Coroutine function returning each chunk, then b"" forever"""
    pending = list(chunks)

    async def read() -> bytes:
        return pending.pop(0) if pending else b""
    return read


async def collect(read):
    return [frame async for frame in iter_frames(read)]


class TestScanFrame:
    def test_complete_frame(self):
        assert scan_frame(b"AB\rCD", at_eof=False) == (3, b"AB")

    def test_partial_needs_more(self):
        assert scan_frame(b"CD", at_eof=False) == (0, None)

    def test_truncated_at_eof(self):
        with pytest.raises(TruncatedFrameError):
            scan_frame(b"EF", at_eof=True)

    def test_clean_eof(self):
        assert scan_frame(b"", at_eof=True) == (0, None)

    def test_empty_frame(self):
        assert scan_frame(b"\rPK\r", at_eof=False) == (1, b"")

    def test_frame_before_eof_still_returned(self):
        assert scan_frame(b"PK\rxx", at_eof=True) == (3, b"PK")


class TestIterFrames:
    @pytest.mark.asyncio
    async def test_single_chunk(self):
        assert await collect(reader(b"PA\rPK\r")) == ["PA", "PK"]

    @pytest.mark.asyncio
    async def test_split_across_chunks(self):
        frames = await collect(reader(b"P", b"A\rPU0810", b"B4\r", b"PK", b"\r"))
        assert frames == ["PA", "PU0810B4", "PK"]

    @pytest.mark.asyncio
    async def test_clean_end(self):
        assert await collect(reader()) == []

    @pytest.mark.asyncio
    async def test_truncated_tail(self):
        seen = []
        with pytest.raises(TruncatedFrameError):
            async for frame in iter_frames(reader(b"PA\rPK\rPU08")):
                seen.append(frame)
        assert seen == ["PA", "PK"]

    @pytest.mark.asyncio
    async def test_nothing_before_delimiter(self):
        read = reader(b"PA")
        frames = iter_frames(read)
        with pytest.raises(TruncatedFrameError):
            await frames.__anext__()


class TestClassifyFrame:
    @pytest.mark.parametrize("text,response", [
        ("PA", PIMResponse.ACCEPT),
        ("PB", PIMResponse.BUSY),
        ("PE", PIMResponse.ERROR),
        ("PK", PIMResponse.ACK),
        ("PN", PIMResponse.NAK),
        ("PU", PIMResponse.REPORT),
    ])
    def test_codes(self, text, response):
        assert classify_frame(text) == (response, "")

    def test_report_payload(self):
        assert classify_frame("PU0800B4FF0B8664") == (PIMResponse.REPORT, "0800B4FF0B8664")

    @pytest.mark.parametrize("text", ["", "P", "XK", "PZ", "pk"])
    def test_malformed(self, text):
        with pytest.raises(MalformedFrameError):
            classify_frame(text)
