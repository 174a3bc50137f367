"""
Bounded handoff between a producing task and a consuming task.
"""

import asyncio
from collections import deque
from typing import Any, Deque, Generic, Optional, TypeVar

from linestream.config import config
from linestream.decoding import Chunk
from linestream.sources.base import ByteSource

T = TypeVar('T')


class Handoff(Generic[T]):
    """
    FIFO of at most ``capacity`` items shared by one producer and one consumer.

    ``put`` suspends while the buffer is full. ``end`` lets the consumer drain
    what is buffered, ``close`` discards it and wakes both sides.
    """

    def __init__(self, capacity: int = 1):
        self.capacity = max(1, capacity)
        self._items: Deque[T] = deque()
        self._readable = asyncio.Event()
        self._writable = asyncio.Event()
        self._writable.set()
        self._ended = False
        self._closed = False
        self._error: Optional[BaseException] = None

    def __len__(self) -> int:
        return len(self._items)

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, item: T) -> bool:
        """
        Add an item once there is room.

        Returns:
            False if the handoff was closed, True otherwise
        """
        while len(self._items) >= self.capacity and not self._closed:
            self._writable.clear()
            await self._writable.wait()

        if self._closed:
            return False
        if self._ended:
            raise RuntimeError("Cannot put after end")

        self._items.append(item)
        self._readable.set()
        return True

    async def get(self, default: Any = None) -> Any:
        """
        Take the next item, waiting for one if needed.

        Returns ``default`` once the handoff is ended and drained, or closed.
        A close error is raised by the first ``get`` that observes it.
        """
        while not self._items:
            if self._closed:
                error, self._error = self._error, None
                if error is not None:
                    raise error
                return default
            if self._ended:
                return default
            self._readable.clear()
            await self._readable.wait()

        item = self._items.popleft()
        self._writable.set()
        return item

    def end(self) -> None:
        """Mark that no more items will be put."""
        self._ended = True
        self._readable.set()

    def close(self, error: Optional[BaseException] = None) -> None:
        """Discard buffered items and wake waiters. Repeated calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._error = error
        self._items.clear()
        self._readable.set()
        self._writable.set()


class ChannelSource(ByteSource):
    """
    Synthetic byte source fed by ``push`` calls.

    A push suspends until the reading side has taken enough earlier chunks,
    which carries backpressure from the reader back to the writer.
    """

    def __init__(self, capacity: Optional[int] = None):
        super().__init__()
        self._handoff: Handoff[Chunk] = Handoff(capacity or config.channel_capacity)

    @property
    def buffered(self) -> int:
        return len(self._handoff)

    @property
    def ended(self) -> bool:
        return self._handoff.ended

    async def push(self, chunk: Chunk) -> bool:
        """Hand a chunk to the reader. Returns False if the source was closed."""
        if self.closed:
            return False
        return await self._handoff.put(chunk)

    def end(self) -> None:
        """Signal that no more chunks will be pushed."""
        self._handoff.end()

    def fail(self, error: BaseException) -> None:
        """Report a producer-side failure to the owner of this source."""
        self.report_error(error)

    def interrupt(self) -> None:
        """Wake any blocked push or read without waiting for the owner."""
        self._handoff.close()

    async def read(self) -> Optional[Chunk]:
        return await self._handoff.get(None)

    async def _release(self) -> None:
        self._handoff.close()
