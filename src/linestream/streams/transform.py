"""
Push-based adapter turning written bytes into readable lines.
"""

import asyncio
import logging
from typing import Optional

from linestream.config import config
from linestream.decoding import Chunk
from linestream.errors import TransformClosedError
from linestream.sources import ChannelSource, Handoff
from linestream.streams.iterator import AsyncLineIterator

logger = logging.getLogger(__name__)

_END = object()


class LineTransform:
    """
    Duplex endpoint: raw chunks are written in, lines are read out.

    Written chunks go through a bounded handoff into an internal
    :class:`ChannelSource`; a drive task runs an :class:`AsyncLineIterator`
    over it and forwards each line into a second bounded handoff that the
    reading side drains. Both handoffs are bounded, so a slow reader
    eventually suspends the writer.

    Example:
        transform = LineTransform()
        await transform.write(b"first\\r")
        await transform.write(b"\\nsecond")
        reader = asyncio.ensure_future(collect(transform))
        await transform.end()
    """

    def __init__(self,
                 encoding: Optional[str] = None,
                 errors: Optional[str] = None,
                 capacity: Optional[int] = None,
                 line_buffer: Optional[int] = None):
        """
        Initialize transform.

        Args:
            encoding: Codec for raw chunks (None for config default)
            errors: Codec error handler (None for config default)
            capacity: Chunks accepted ahead of the drive task (None for config default)
            line_buffer: Lines held for the reading side (None for config default)
        """
        self.encoding = encoding
        self.errors = errors
        self._channel = ChannelSource(capacity)
        self._lines: Handoff[str] = Handoff(line_buffer or config.line_buffer)
        self._task: Optional[asyncio.Task] = None
        self._started = False
        self._closing: Optional[asyncio.Task] = None
        self._ending = False
        self._destroyed = False
        self._error: Optional[BaseException] = None

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def error(self) -> Optional[BaseException]:
        """The failure that destroyed the transform, if any."""
        return self._error

    @property
    def writable(self) -> bool:
        return not (self._ending or self._destroyed)

    @property
    def source(self) -> ChannelSource:
        return self._channel

    async def write(self, chunk: Chunk) -> None:
        """Write a chunk, suspending until the drive task has room for it."""
        if not self.writable:
            raise self._write_error("write")
        self._ensure_started()
        if not await self._channel.push(chunk):
            # The channel only closes while the drive task unwinds
            await asyncio.wait({self._task})
            raise self._write_error("write")

    async def end(self) -> None:
        """
        Signal end of input and wait until every remaining line is forwarded.

        Raises the adapter failure if the drive task failed.
        """
        if self._destroyed:
            raise self._write_error("end")
        if not self._ending:
            self._ending = True
            self._ensure_started()
            self._channel.end()

        await asyncio.wait({self._task})
        if self._destroyed:
            raise self._write_error("end")

    async def read(self) -> Optional[str]:
        """Return the next line, None once all lines were read."""
        self._ensure_started()
        line = await self._lines.get(_END)
        return None if line is _END else line

    def __aiter__(self) -> 'LineTransform':
        return self

    async def __anext__(self) -> str:
        line = await self.read()
        if line is None:
            raise StopAsyncIteration
        return line

    def destroy(self, error: Optional[BaseException] = None) -> None:
        """
        Abort the transform. Repeated calls are no-ops.

        Pending writes and reads are woken, the drive task is cancelled and
        releases its source. ``error`` is raised to the reading side once.
        """
        if self._destroyed:
            return
        self._destroyed = True
        self._error = error
        if error is not None:
            logger.debug(f"Transform failed: {error!r}")
        else:
            logger.debug("Transform destroyed")

        self._lines.close(error)
        self._channel.interrupt()

        task = self._task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

        if not self._started:
            # No drive loop owns the channel yet, so release it here
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return
            self._closing = loop.create_task(self._channel.close())

    async def aclose(self) -> None:
        """Destroy the transform and wait for the drive task to unwind."""
        self.destroy()
        if self._task is not None:
            await asyncio.wait({self._task})
        if self._closing is not None:
            await self._closing
        await self._channel.close()

    async def __aenter__(self) -> 'LineTransform':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.aclose()
        return False

    def _ensure_started(self) -> None:
        if self._task is None and not self._destroyed:
            self._task = asyncio.get_running_loop().create_task(self._drive())

    async def _drive(self) -> None:
        self._started = True
        try:
            async with AsyncLineIterator(self._channel, self.encoding, self.errors) as lines:
                async for line in lines:
                    if not await self._lines.put(line):
                        logger.debug("Reading side closed, line forwarding stopped")
                        break
                else:
                    self._lines.end()
        except Exception as error:
            self.destroy(error)

    def _write_error(self, operation: str) -> BaseException:
        if self._error is not None:
            return self._error
        if self._destroyed:
            return TransformClosedError(f"Cannot {operation}: transform destroyed")
        return TransformClosedError(f"Cannot {operation}: transform already ended")


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
