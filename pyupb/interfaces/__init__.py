# pyupb/interfaces/__init__.py
"""
pyupb Transport Interfaces

Provides:
- BaseTransport: blocking byte-stream contract driven by the session
- SerialTransport: pyserial implementation for a PIM

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

from .transport import BaseTransport, SerialTransport

__all__ = [
    'BaseTransport',
    'SerialTransport',
]
