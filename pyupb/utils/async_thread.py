# pyupb/utils/async_thread.py
"""
Asynchronous Thread Utilities

Provides:
- run_in_thread: Execute blocking serial calls without blocking the event loop
- create_executor: Dedicated pool for one connection's reader and writer

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

import asyncio
import atexit
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# Global thread pool for blocking operations
_DEFAULT_EXECUTOR = ThreadPoolExecutor(
    max_workers=4,
    thread_name_prefix='AsyncThreadPool'
)

async def run_in_thread(
    func: Callable[..., Any],
    *args,
    executor: Optional[Executor] = None,
    **kwargs
) -> Any:
    """
    Run blocking function in thread pool executor.
    
    Args:
        func: Blocking callable to execute
        *args: Positional arguments for func
        executor: Pool to use (default: the global pool)
        **kwargs: Keyword arguments for func
        
    Returns:
        Result of func(*args, **kwargs)
        
    Example:
        async def main():
            data = await run_in_thread(transport.read, 64)
    """
    loop = asyncio.get_running_loop()
    wrapped = partial(func, *args, **kwargs)
    name = getattr(func, '__name__', repr(func))
    logger.debug(f"Executing {name} in thread pool")
    try:
        result = await loop.run_in_executor(executor or _DEFAULT_EXECUTOR, wrapped)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.debug(f"Thread execution of {name} failed: {e}")
        raise
    return result

def create_executor(name: str, max_workers: int = 2) -> ThreadPoolExecutor:
    """
    Create a private pool so a blocked reader never starves writes.

    Args:
        name: Thread name prefix
        max_workers: One reader plus one writer by default
    """
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)

atexit.register(lambda: _DEFAULT_EXECUTOR.shutdown(wait=False))
