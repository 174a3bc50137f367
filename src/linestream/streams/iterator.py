"""
Pull-based line iteration over byte sources.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Iterator, Optional

from linestream.decoding import Chunk, IncrementalByteDecoder
from linestream.lines import LineAccumulator
from linestream.sources import ByteSource, SyncByteSource, as_byte_source, as_sync_byte_source

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


class _LineAssembler:
    """Decoder and accumulator feeding one iterator."""

    def __init__(self, encoding: Optional[str], errors: Optional[str]):
        self.decoder = IncrementalByteDecoder(encoding, errors)
        self.accumulator = LineAccumulator()
        self._ready: Iterator[str] = iter(())

    def next_ready(self) -> Any:
        return next(self._ready, _EXHAUSTED)

    def feed(self, chunk: Chunk) -> None:
        self._ready = self.accumulator.push(self.decoder.feed(chunk))

    def finish(self) -> None:
        self._ready = self.accumulator.finish(self.decoder.finalize())

    def discard(self) -> None:
        self._ready = iter(())


class AsyncLineIterator(AsyncIterator[str]):
    """
    Lazy, single-pass sequence of lines read from a byte source.

    A chunk is pulled from the source only when no complete line is ready.
    The iterator owns the source and releases it exactly once: at natural
    end, on failure, or on early stop through :meth:`aclose`,
    :meth:`athrow` or leaving an ``async with`` block.

    Breaking out of a bare ``async for`` does not close an async iterator,
    so the source would stay open until the iterator is garbage collected.
    Use ``async with`` or call :meth:`aclose` when stopping early.

    Example:
        async with AsyncLineIterator(reader) as lines:
            async for line in lines:
                if line == "END":
                    break
    """

    def __init__(self, source: Any, encoding: Optional[str] = None, errors: Optional[str] = None):
        """
        Initialize iterator.

        Args:
            source: A ByteSource, or anything ``as_byte_source`` accepts
            encoding: Codec for raw chunks (None for config default)
            errors: Codec error handler (None for config default)
        """
        self._source: ByteSource = as_byte_source(source)
        self._assembler = _LineAssembler(encoding, errors)
        self._eof = False
        self._done = False
        self._failure: Optional[BaseException] = None
        self._failure_signal: Optional[asyncio.Future] = None
        self._inflight: Optional[asyncio.Future] = None
        self._closing: Optional[asyncio.Future] = None
        self._source.add_error_listener(self._on_source_error)

    @property
    def source(self) -> ByteSource:
        return self._source

    @property
    def done(self) -> bool:
        """True once no further line will be returned."""
        return self._done

    @property
    def released(self) -> bool:
        return self._closing is not None

    def __aiter__(self) -> 'AsyncLineIterator':
        return self

    async def __anext__(self) -> str:
        while not self._done:
            line = self._assembler.next_ready()
            if line is not _EXHAUSTED:
                return line

            if self._failure is not None:
                await self._fail(self._failure)

            if self._eof:
                self._done = True
                await self._release()
                break

            try:
                chunk = await self._pull()
                if chunk is _EXHAUSTED:
                    # Stopped while the read was pending
                    self._done = True
                    await self._release()
                    break
                if chunk is None:
                    self._eof = True
                    self._assembler.finish()
                else:
                    self._assembler.feed(chunk)
            except Exception as error:
                await self._fail(error)

        raise StopAsyncIteration

    async def aclose(self) -> None:
        """Stop iterating and release the source. Repeated calls are no-ops."""
        if not self._done:
            logger.debug("Line iteration stopped before end of input")
        self._done = True
        self._failure = None
        self._assembler.discard()
        await self._release()

    async def athrow(self, error: BaseException) -> None:
        """Stop iterating because of ``error``, release the source, then raise it."""
        await self.aclose()
        raise error

    async def __aenter__(self) -> 'AsyncLineIterator':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.aclose()
        return False

    async def _pull(self) -> Any:
        """
        Read one chunk, racing the read against an out-of-band failure.

        Returns the chunk, None at end of input, or ``_EXHAUSTED`` when the
        iterator was closed while the read was pending.
        """
        if self._failure_signal is None:
            self._failure_signal = asyncio.get_running_loop().create_future()

        read = asyncio.ensure_future(self._source.read())
        self._inflight = read
        try:
            await asyncio.wait({read, self._failure_signal}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            read.cancel()
            raise

        if self._failure is not None:
            # The read is abandoned and cancelled on release
            raise self._failure

        if self._done or read.cancelled():
            # aclose() from another task cancelled or discarded the read
            return _EXHAUSTED

        self._inflight = None
        return read.result()

    async def _fail(self, error: BaseException) -> None:
        self._failure = None
        self._done = True
        self._assembler.discard()
        logger.debug(f"Line iteration failed: {error!r}")
        await self._release()
        raise error

    def _on_source_error(self, error: BaseException) -> None:
        if self._done or self._failure is not None:
            return
        logger.debug(f"Captured source failure: {error!r}")
        self._failure = error
        if self._failure_signal is not None and not self._failure_signal.done():
            self._failure_signal.set_result(None)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        # Release now; the failure is still delivered by the next pull
        self._closing = loop.create_task(self._close_source())

    async def _release(self) -> None:
        if self._closing is None:
            self._closing = asyncio.ensure_future(self._close_source())
        await asyncio.shield(self._closing)

    async def _close_source(self) -> None:
        inflight, self._inflight = self._inflight, None
        if inflight is not None:
            if not inflight.done():
                inflight.cancel()
                await asyncio.wait({inflight})
            if not inflight.cancelled():
                # Errors of an abandoned read are superseded
                inflight.exception()

        self._source.remove_error_listener(self._on_source_error)
        await self._source.close()


class LineIterator(Iterator[str]):
    """
    Blocking counterpart of :class:`AsyncLineIterator` for synchronous sources.

    Use it as a context manager (or call :meth:`close`) so the source is
    released when iteration stops early.
    """

    def __init__(self, source: Any, encoding: Optional[str] = None, errors: Optional[str] = None):
        self._source: SyncByteSource = as_sync_byte_source(source)
        self._assembler = _LineAssembler(encoding, errors)
        self._eof = False
        self._done = False
        self._released = False
        self._failure: Optional[BaseException] = None
        self._source.add_error_listener(self._on_source_error)

    @property
    def source(self) -> SyncByteSource:
        return self._source

    @property
    def done(self) -> bool:
        return self._done

    @property
    def released(self) -> bool:
        return self._released

    def __iter__(self) -> 'LineIterator':
        return self

    def __next__(self) -> str:
        while not self._done:
            line = self._assembler.next_ready()
            if line is not _EXHAUSTED:
                return line

            if self._failure is not None:
                self._fail(self._failure)

            if self._eof:
                self._done = True
                self._release()
                break

            try:
                chunk = self._source.read_sync()
                if chunk is None:
                    self._eof = True
                    self._assembler.finish()
                else:
                    self._assembler.feed(chunk)
            except Exception as error:
                self._fail(error)

        raise StopIteration

    def close(self) -> None:
        """Stop iterating and release the source. Repeated calls are no-ops."""
        if not self._done:
            logger.debug("Line iteration stopped before end of input")
        self._done = True
        self._failure = None
        self._assembler.discard()
        self._release()

    def throw(self, error: BaseException) -> None:
        """Stop iterating because of ``error``, release the source, then raise it."""
        self.close()
        raise error

    def __enter__(self) -> 'LineIterator':
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def _fail(self, error: BaseException) -> None:
        self._failure = None
        self._done = True
        self._assembler.discard()
        logger.debug(f"Line iteration failed: {error!r}")
        self._release()
        raise error

    def _on_source_error(self, error: BaseException) -> None:
        if self._done or self._failure is not None:
            return
        logger.debug(f"Captured source failure: {error!r}")
        self._failure = error
        self._release()

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self._source.remove_error_listener(self._on_source_error)
        self._source.close_sync()


def iterate_lines(source: Any, encoding: Optional[str] = None, errors: Optional[str] = None) -> AsyncLineIterator:
    """Iterate asynchronously over the lines of a byte source."""
    return AsyncLineIterator(source, encoding=encoding, errors=errors)


def iter_lines(source: Any, encoding: Optional[str] = None, errors: Optional[str] = None) -> LineIterator:
    """Iterate over the lines of a synchronous byte source."""
    return LineIterator(source, encoding=encoding, errors=errors)
