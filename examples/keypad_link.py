# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
examples/keypad_link.py

React to device reports by sending commands back on the same link.

A keypad (device 0x0B) reports its state; the script toggles it, sending
Deactivate when the reported level is non-zero and Activate otherwise. A
link Activate addressed to the keypad triggers a Report State request two
seconds later.

The report sink is a coroutine, so it may await Connection.send(): each
report runs in its own task and the session serializes the transmissions.
"""

import asyncio
import logging

from pyupb import Connection, DeviceCommand, UPBConfig, UPBMessage, configure_logging, open_connection

logger = logging.getLogger("keypad_link")

SERIAL_PORT = "/dev/ttyUSB0"
NETWORK_ID = 0xB4
KEYPAD_ID = 0x0B

conn: Connection

async def on_report(raw: bytes) -> None:
    msg = UPBMessage.from_bytes(raw)
    if msg.network != NETWORK_ID:
        return
    if msg.is_link and msg.destination == KEYPAD_ID and msg.command == DeviceCommand.ACTIVATE:
        await asyncio.sleep(2)
        await conn.report_state(KEYPAD_ID)
    elif (not msg.is_link and msg.destination == 0xFF and msg.source == KEYPAD_ID
          and msg.command == DeviceCommand.DEVICE_STATE and msg.args):
        command = DeviceCommand.DEACTIVATE if msg.args[0] else DeviceCommand.ACTIVATE
        await conn.send(conn.build_message(KEYPAD_ID, command))

async def run() -> None:
    global conn
    conn = await open_connection(SERIAL_PORT, UPBConfig(
        network_id=NETWORK_ID,
        log_sink=logger.info,
        report_sink=on_report,
    ))
    async with conn:
        await asyncio.Event().wait()

if __name__ == "__main__":
    configure_logging("INFO")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
