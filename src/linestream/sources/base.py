"""Readable byte source capability."""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from linestream.decoding import Chunk

logger = logging.getLogger(__name__)

ErrorListener = Callable[[BaseException], None]


class ByteSource(ABC):
    """
    Ordered producer of chunks with an idempotent release.

    ``read()`` returns the next chunk, or None once the source is exhausted.
    Failures are raised from ``read()``, or reported out of band through
    :meth:`report_error` to whoever owns the source.
    """

    def __init__(self):
        self._closed = False
        self._error_listeners: List[ErrorListener] = []

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    async def read(self) -> Optional[Chunk]:
        """Return the next chunk, None at end of input."""
        pass

    async def close(self) -> None:
        """Release the underlying resource. Repeated calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._error_listeners.clear()
        logger.debug(f"Releasing {type(self).__name__}")
        await self._release()

    async def _release(self) -> None:
        """Release the underlying resource, called at most once."""
        pass

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Register a callback for out-of-band failures."""
        self._error_listeners.append(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        """Remove a failure callback."""
        if listener in self._error_listeners:
            self._error_listeners.remove(listener)

    def report_error(self, error: BaseException) -> None:
        """Notify listeners that the source failed outside of a read."""
        logger.debug(f"{type(self).__name__} reported {error!r}")
        for listener in list(self._error_listeners):
            listener(error)


class SyncByteSource(ByteSource):
    """
    Byte source that can also be read without an event loop.

    Reads are expected to return promptly (in-memory data, local files);
    awaiting them from a coroutine runs them inline.
    """

    @abstractmethod
    def read_sync(self) -> Optional[Chunk]:
        """Return the next chunk, None at end of input."""
        pass

    async def read(self) -> Optional[Chunk]:
        return self.read_sync()

    def close_sync(self) -> None:
        """Release the underlying resource. Repeated calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._error_listeners.clear()
        logger.debug(f"Releasing {type(self).__name__}")
        self._release_sync()

    async def _release(self) -> None:
        self._release_sync()

    def _release_sync(self) -> None:
        """Release the underlying resource, called at most once."""
        pass
