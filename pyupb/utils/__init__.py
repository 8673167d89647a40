# pyupb/utils/__init__.py
"""
pyupb Utilities Module

Provides thread offloading for blocking serial I/O and package-wide logging
setup.

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

import logging
from typing import List

from .async_thread import run_in_thread, create_executor

__all__: List[str] = [
    'run_in_thread',
    'create_executor',
    'configure_logging',
]

def configure_logging(level: str = "INFO") -> None:
    """
    Configure package-wide logging.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )
