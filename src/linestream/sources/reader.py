"""Sources over file-like objects and asyncio stream readers."""

import inspect
from typing import Any, Optional

from linestream.config import config
from linestream.decoding import Chunk
from linestream.sources.base import ByteSource, SyncByteSource


class FileSource(SyncByteSource):
    """
    Read fixed-size chunks from a blocking file-like object.

    Works with binary files (bytes chunks) and text files (str chunks).
    The file is closed on release unless ``close_on_release`` is False.
    """

    def __init__(self, file: Any, read_size: Optional[int] = None, close_on_release: bool = True):
        super().__init__()
        self._file = file
        self.read_size = read_size or config.calculate_read_size()
        self.close_on_release = close_on_release

    def read_sync(self) -> Optional[Chunk]:
        if self.closed:
            return None
        chunk = self._file.read(self.read_size)
        return chunk if chunk else None

    def _release_sync(self) -> None:
        if self.close_on_release and hasattr(self._file, "close"):
            self._file.close()


class ReaderSource(ByteSource):
    """
    Read chunks from an object whose ``read(n)`` is a coroutine.

    Fits :class:`asyncio.StreamReader` and similar async readers. A
    ``close()`` method on the reader (sync or async) is called on release.
    """

    def __init__(self, reader: Any, read_size: Optional[int] = None):
        super().__init__()
        self._reader = reader
        self.read_size = read_size or config.calculate_read_size()

    async def read(self) -> Optional[Chunk]:
        if self.closed:
            return None
        chunk = await self._reader.read(self.read_size)
        return chunk if chunk else None

    async def _release(self) -> None:
        close = getattr(self._reader, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result
