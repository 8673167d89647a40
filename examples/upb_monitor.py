# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
examples/upb_monitor.py

Print every UPB message report seen by a PIM.

This example demonstrates:
- Opening a serial PIM
- Streaming wire activity through the log sink
- Decoding message reports delivered to the report sink
- Graceful shutdown on interrupt

Run with:
    python examples/upb_monitor.py

Adjust the serial port and network ID for your installation.
"""

import asyncio
import logging

from pyupb import UPBConfig, UPBMessage, configure_logging, open_connection

logger = logging.getLogger("upb_monitor")

# Default configuration - modify for your setup
SERIAL_PORT = "/dev/ttyUSB0"      # Windows: "COM3"
NETWORK_ID = 0xB4

def on_report(message: bytes) -> None:
    """Report sink: print the decoded message."""
    print(UPBMessage.from_bytes(message))

async def monitor() -> None:
    config = UPBConfig(
        network_id=NETWORK_ID,
        log_sink=logger.debug,
        report_sink=on_report,
    )
    async with await open_connection(SERIAL_PORT, config):
        logger.info("Monitoring started - waiting for reports...")
        await asyncio.Event().wait()

def main() -> None:
    configure_logging("INFO")
    print(f"Connecting to {SERIAL_PORT}, network {NETWORK_ID:02X}")
    print("Press Ctrl+C to stop\n")
    try:
        asyncio.run(monitor())
    except KeyboardInterrupt:
        pass
    print("Monitor stopped.")

if __name__ == "__main__":
    main()
