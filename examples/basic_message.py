# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
examples/basic_message.py

Build a UPB Goto message and show the bytes a PIM would receive.

No hardware needed. Run this script directly to see the output.
"""

from pyupb.core.codec import DeviceCommand, build_message, checksum, encode_transmit

NETWORK_ID = 0xB4

def main() -> None:
    message = build_message(NETWORK_ID, 0x01, DeviceCommand.GOTO, bytes([100]))
    wire = encode_transmit(message)

    print("UPB Goto Example")
    print("=" * 50)
    print(f"Message (hex): {message.hex(' ').upper()}")
    print(f"  LEN:         {message[0]:02X}")
    print(f"  CONTROL:     {message[1]:02X} (Ack Pulse requested)")
    print(f"  NETWORK:     {message[2]:02X}")
    print(f"  DEST:        {message[3]:02X}")
    print(f"  SRC:         {message[4]:02X} (host)")
    print(f"  CMD:         {message[5]:02X} (Goto)")
    print(f"  Level:       {message[6]}%")
    print(f"  Checksum:    {checksum(message):02X}")
    print(f"Wire bytes:    {wire!r}")

if __name__ == "__main__":
    main()
