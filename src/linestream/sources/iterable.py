"""Sources over iterables of chunks."""

from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, Optional

from linestream.decoding import Chunk
from linestream.errors import UnsupportedChunkError
from linestream.sources.base import ByteSource, SyncByteSource

_END = object()


def _checked(chunk: object) -> Chunk:
    # None is reserved for end of input
    if chunk is None:
        raise UnsupportedChunkError(chunk)
    return chunk


class AsyncIterableSource(ByteSource):
    """Pull chunks from an async iterable such as an async generator."""

    def __init__(self, chunks: AsyncIterable[Chunk]):
        super().__init__()
        self._iterator: AsyncIterator[Chunk] = chunks.__aiter__()

    async def read(self) -> Optional[Chunk]:
        if self.closed:
            return None
        try:
            chunk = await self._iterator.__anext__()
        except StopAsyncIteration:
            return None
        return _checked(chunk)

    async def _release(self) -> None:
        aclose = getattr(self._iterator, "aclose", None)
        if aclose is not None:
            await aclose()


class IterableSource(SyncByteSource):
    """Pull chunks from a synchronous iterable such as a generator."""

    def __init__(self, chunks: Iterable[Chunk]):
        super().__init__()
        self._iterator: Iterator[Chunk] = iter(chunks)

    def read_sync(self) -> Optional[Chunk]:
        if self.closed:
            return None
        chunk = next(self._iterator, _END)
        if chunk is _END:
            return None
        return _checked(chunk)

    def _release_sync(self) -> None:
        close = getattr(self._iterator, "close", None)
        if close is not None:
            close()
