# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pyupb.core.session.py

PIM request/response state machine.

One asyncio control loop owns the transport's write side and all protocol
state. Callers hand it Requests through a FIFO queue and wait on a future;
a reader task feeds it CR-delimited frames. Exactly one Request is on the
wire at any time: the queue is only drained while IDLE.

States:
    IDLE               no request outstanding
    AWAITING_RESPONSE  a message was transmitted; waiting for PK/PN/PB/PE
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from typing import Deque, Optional, Set

from .codec import ACK_PULSE_BIT, RETRANSMIT_MASK, decode_report, encode_transmit
from .config import UPBConfig
from .exceptions import (
    ConnectionClosedError,
    FrameError,
    MissingAckError,
    PIMBusyError,
    PIMRejectedError,
    ResponseTimeoutError,
    TransportError,
)
from .framing import PIMResponse, classify_frame, iter_frames
from ..utils.async_thread import create_executor, run_in_thread

logger = logging.getLogger(__name__)

# Pause after a failed read before reading again
READ_RETRY_DELAY = 0.1


class SessionState(Enum):
    """Session states"""
    IDLE = auto()
    AWAITING_RESPONSE = auto()


@dataclass
class Request:
    """A message waiting to be sent, and the slot its outcome goes to"""
    message: bytes
    future: asyncio.Future

    @property
    def ack_requested(self) -> bool:
        return len(self.message) > 1 and bool(self.message[1] & ACK_PULSE_BIT)


class UPBSession:
    """
    Protocol actor for one PIM link.

    Args:
        transport: Open BaseTransport; owned by the session from now on
        config: Connection configuration
        executor: Thread pool for blocking transport calls
    """

    def __init__(
        self,
        transport,
        config: UPBConfig,
        executor: Optional[ThreadPoolExecutor] = None
    ) -> None:
        self.transport = transport
        self.config = config
        self.state: SessionState = SessionState.IDLE

        self._pending: Optional[Request] = None
        self._deadline: Optional[float] = None
        self._requests: Deque[Request] = deque()
        self._request_ready = asyncio.Event()
        self._frames: asyncio.Queue = asyncio.Queue()
        self._report_tasks: Set[asyncio.Task] = set()

        self._executor = executor or create_executor("UPB-IO")
        self._reader_task: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def queued(self) -> int:
        """Requests submitted but not yet transmitted"""
        return len(self._requests)

    def start(self) -> None:
        """Start the reader task and the control loop."""
        if self._loop_task is not None:
            return
        self._reader_task = asyncio.create_task(self._read_loop(), name="UPB-Reader")
        self._loop_task = asyncio.create_task(self._control_loop(), name="UPB-Session")
        logger.info(f"Session started on {self.transport!r}")

    def submit(self, message: bytes) -> asyncio.Future:
        """
        Queue a message for transmission.

        Returns:
            Future resolved with None on success, or with the error

        Raises:
            ConnectionClosedError: The session is closed
        """
        if self._closed:
            raise ConnectionClosedError("Connection is closed")
        request = Request(bytes(message), asyncio.get_running_loop().create_future())
        self._requests.append(request)
        self._request_ready.set()
        return request.future

    async def close(self) -> None:
        """
        Stop accepting requests, stop both tasks and close the transport.

        Every request still queued or in flight resolves with
        ConnectionClosedError.
        """
        if self._closed and self._loop_task is None:
            return
        self._closed = True
        # Unblocks the reader thread
        self.transport.close()

        current = asyncio.current_task()
        tasks = [t for t in (self._loop_task, self._reader_task, *self._report_tasks)
                 if t is not None and t is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        self._reader_task = None

        self._shutdown("Connection closed")
        self._executor.shutdown(wait=False)
        logger.info("Session closed")

    def _trace(self, message: str) -> None:
        """Send a line of wire activity to the logger and the log sink."""
        logger.debug(message)
        try:
            self.config.log_sink(message)
        except Exception as e:
            logger.error(f"Log sink failed: {e}")

    async def _read(self) -> bytes:
        return await run_in_thread(
            self.transport.read, self.config.read_size, executor=self._executor
        )

    async def _read_loop(self) -> None:
        """
        Pull frames off the transport until the stream ends.

        A failed read is queued for the control loop and reading resumes
        with an empty buffer while the transport is still open.
        """
        try:
            while True:
                try:
                    async for frame in iter_frames(self._read):
                        self._frames.put_nowait(frame)
                    break
                except FrameError as e:
                    self._trace(f"discarding trailing data: {e}")
                    break
                except TransportError as e:
                    error = e
                except Exception as e:
                    error = TransportError(f"Read failed: {e}")

                logger.error(f"Receive error: {error}")
                self._trace(f"receive error: {error}")
                if not self.transport.is_open:
                    break
                self._frames.put_nowait(error)
                await asyncio.sleep(READ_RETRY_DELAY)
        finally:
            # End-of-stream marker for the control loop
            self._frames.put_nowait(None)

    async def _control_loop(self) -> None:
        loop = asyncio.get_running_loop()
        frame_get: Optional[asyncio.Future] = None
        ready_wait: Optional[asyncio.Future] = None
        try:
            while True:
                timeout = None
                if self.state is SessionState.IDLE:
                    if self._requests:
                        await self._transmit(self._requests.popleft())
                        continue
                elif self._deadline is not None:
                    timeout = self._deadline - loop.time()
                    if timeout <= 0:
                        self._respond(ResponseTimeoutError(
                            f"No PIM response within {self.config.response_timeout}s"
                        ))
                        continue

                if frame_get is None:
                    frame_get = asyncio.ensure_future(self._frames.get())
                waiting = {frame_get}
                if self.state is SessionState.IDLE:
                    if ready_wait is None:
                        ready_wait = asyncio.ensure_future(self._request_ready.wait())
                    waiting.add(ready_wait)

                done, _ = await asyncio.wait(
                    waiting, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
                )
                if ready_wait is not None and ready_wait in done:
                    ready_wait = None
                    self._request_ready.clear()
                if frame_get in done:
                    frame = frame_get.result()
                    frame_get = None
                    if frame is None:
                        self._trace("end of stream")
                        break
                    if isinstance(frame, TransportError):
                        self._handle_read_error(frame)
                    else:
                        self._handle_frame(frame)
        finally:
            for waiter in (frame_get, ready_wait):
                if waiter is not None:
                    waiter.cancel()
            self._shutdown("Link closed")

    async def _transmit(self, request: Request) -> None:
        if request.future.done():
            self._trace(f"dropping abandoned request {request.message.hex()}")
            return
        self._pending = request
        self.state = SessionState.AWAITING_RESPONSE
        if self.config.response_timeout is not None:
            self._deadline = asyncio.get_running_loop().time() + self.config.response_timeout

        self._trace(f"tx {request.message.hex()}")
        try:
            await run_in_thread(
                self.transport.write, encode_transmit(request.message),
                executor=self._executor
            )
        except TransportError as e:
            self._respond(e)
        except Exception as e:
            self._respond(TransportError(f"Write failed: {e}"))

    def _respond(self, outcome: Optional[Exception]) -> None:
        """Hand the outcome to the pending request and return to IDLE."""
        request = self._pending
        self._pending = None
        self._deadline = None
        self.state = SessionState.IDLE

        self._trace(f"response: {outcome if outcome is not None else 'ok'}")
        if request is None:
            return
        if request.future.done():
            self._trace("failed to send response: caller gone")
            return
        if outcome is None:
            request.future.set_result(None)
        else:
            request.future.set_exception(outcome)

    def _handle_read_error(self, error: TransportError) -> None:
        """A read failure fails the request in flight, not the connection."""
        if self.state is SessionState.AWAITING_RESPONSE:
            self._respond(error)
        else:
            self._trace("receive error with no request pending")

    def _handle_frame(self, text: str) -> None:
        self._trace(f"rx {text!r}")
        try:
            response, payload = classify_frame(text)
        except FrameError as e:
            self._trace(f"discarding frame: {e}")
            return

        if response is PIMResponse.REPORT:
            self._handle_report(payload)
            return

        if self.state is not SessionState.AWAITING_RESPONSE:
            self._trace(f"unexpected {response.name} with no request pending")
            return

        if response is PIMResponse.ACCEPT:
            # PK or PN follows
            return
        if response is PIMResponse.BUSY:
            self._respond(PIMBusyError("PIM busy"))
        elif response is PIMResponse.ERROR:
            self._respond(PIMRejectedError("PIM error"))
        elif response is PIMResponse.ACK:
            self._respond(None)
        elif response is PIMResponse.NAK:
            if self._pending.ack_requested:
                self._respond(MissingAckError("missing Ack Pulse"))
            else:
                self._respond(None)

    def _handle_report(self, payload: str) -> None:
        try:
            message = decode_report(payload, strict_length=self.config.strict_length)
        except FrameError as e:
            self._trace(f"message decode error: {e}")
            return
        if message[1] & RETRANSMIT_MASK:
            # TODO: deliver retransmits once duplicates can be told apart from
            # repeats (DESIGN.md, "Retransmitted reports")
            self._trace(f"dropping retransmitted report {message.hex()}")
            return

        task = asyncio.create_task(self._dispatch_report(message))
        self._report_tasks.add(task)
        task.add_done_callback(self._report_tasks.discard)

    async def _dispatch_report(self, message: bytes) -> None:
        try:
            result = self.config.report_sink(message)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Report handler error: {e}")

    def _shutdown(self, reason: str) -> None:
        self._closed = True
        if self._pending is not None:
            self._respond(ConnectionClosedError(reason))
        while self._requests:
            request = self._requests.popleft()
            if not request.future.done():
                request.future.set_exception(ConnectionClosedError(reason))

    def __repr__(self) -> str:
        return (f"UPBSession({self.state.name}, queued={len(self._requests)}, "
                f"closed={self._closed})")
