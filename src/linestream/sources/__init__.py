"""Byte sources consumed by line iterators."""

import inspect
from typing import Any

from linestream.sources.base import ByteSource, SyncByteSource, ErrorListener
from linestream.sources.iterable import AsyncIterableSource, IterableSource
from linestream.sources.reader import FileSource, ReaderSource
from linestream.sources.channel import ChannelSource, Handoff


def as_byte_source(obj: Any) -> ByteSource:
    """
    Wrap an object as a byte source.

    Accepts an existing source, an object with a ``read(n)`` method
    (coroutine or blocking), an async iterable of chunks, or an iterable
    of chunks.
    """
    if isinstance(obj, ByteSource):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview, str)):
        raise TypeError("Expected a source of chunks, got a single chunk")
    # Readers first: files and stream readers also iterate by line
    read = getattr(obj, "read", None)
    if read is not None and callable(read):
        if inspect.iscoroutinefunction(read):
            return ReaderSource(obj)
        return FileSource(obj)
    if hasattr(obj, "__aiter__"):
        return AsyncIterableSource(obj)
    if hasattr(obj, "__iter__"):
        return IterableSource(obj)
    raise TypeError(f"Cannot read chunks from {type(obj).__name__}")


def as_sync_byte_source(obj: Any) -> SyncByteSource:
    """Wrap an object as a byte source readable without an event loop."""
    source = as_byte_source(obj)
    if not isinstance(source, SyncByteSource):
        raise TypeError(f"{type(source).__name__} can only be read asynchronously")
    return source


__all__ = [
    "ByteSource",
    "SyncByteSource",
    "ErrorListener",
    "AsyncIterableSource",
    "IterableSource",
    "FileSource",
    "ReaderSource",
    "ChannelSource",
    "Handoff",
    "as_byte_source",
    "as_sync_byte_source",
]
