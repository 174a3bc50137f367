"""
Lazy line streams over byte sources.
"""

from contextlib import closing
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Optional, Union

from linestream.decoding import Chunk
from linestream.sources import FileSource, IterableSource
from linestream.streams.iterator import LineIterator

Opener = Callable[[], LineIterator]


class LineStream(Iterable[str]):
    """
    A lazy, re-iterable description of the lines of a byte source.

    Every iteration opens a fresh :class:`LineIterator` and releases its
    source as soon as iteration stops, including when ``take`` or ``first``
    stop before the end of input.
    """

    def __init__(self, opener: Opener, limit: Optional[int] = None):
        """
        Initialize stream.

        Args:
            opener: Callable returning a new LineIterator for each iteration
            limit: Maximum number of lines to read (None for all)
        """
        if not callable(opener):
            raise TypeError("Opener must be callable")

        self._opener = opener
        self._limit = None if limit is None else max(0, limit)

    def __iter__(self) -> Iterator[str]:
        return self._iterate()

    def _iterate(self) -> Iterator[str]:
        if self._limit == 0:
            return

        with self._opener() as lines:
            if self._limit is None:
                yield from lines
                return

            # Stop right after the last line so nothing more is read
            for count, line in enumerate(lines, 1):
                yield line
                if count >= self._limit:
                    break

    def take(self, n: int) -> 'LineStream':
        """Limit the stream to its first n lines."""
        limit = n if self._limit is None else min(self._limit, n)
        return LineStream(self._opener, limit)

    def collect(self) -> List[str]:
        """Collect all lines into a list."""
        return list(self)

    def count(self) -> int:
        """Count lines without keeping them."""
        return sum(1 for _ in self)

    def first(self) -> Optional[str]:
        """Get the first line, reading no further than needed."""
        with closing(self._iterate()) as iterator:
            return next(iterator, None)

    def to_file(self, path: Union[str, Path], newline: str = "\n", encoding: str = "utf-8") -> int:
        """
        Write lines to a file, each ended with ``newline``.

        Mixed terminators in the input are rewritten to a single one.

        Returns:
            Number of lines written
        """
        path = Path(path)
        written = 0

        with open(path, "w", encoding=encoding, newline="") as f:
            for line in self:
                f.write(line + newline)
                written += 1

        return written

    # Factory methods

    @classmethod
    def from_chunks(cls,
                    chunks: Union[Iterable[Chunk], Callable[[], Iterable[Chunk]]],
                    encoding: Optional[str] = None,
                    errors: Optional[str] = None) -> 'LineStream':
        """Create stream from an iterable of chunks, or a callable returning one."""
        factory = chunks if callable(chunks) else (lambda: chunks)
        return cls(lambda: LineIterator(IterableSource(factory()), encoding=encoding, errors=errors))

    @classmethod
    def from_file(cls,
                  path: Union[str, Path],
                  encoding: Optional[str] = None,
                  errors: Optional[str] = None,
                  read_size: Optional[int] = None) -> 'LineStream':
        """Create stream from a file, reopened in binary mode on every iteration."""
        path = Path(path)

        def opener() -> LineIterator:
            source = FileSource(open(path, "rb"), read_size=read_size)
            return LineIterator(source, encoding=encoding, errors=errors)

        return cls(opener)

    @classmethod
    def from_reader(cls,
                    reader: Any,
                    encoding: Optional[str] = None,
                    errors: Optional[str] = None,
                    read_size: Optional[int] = None) -> 'LineStream':
        """Create single-use stream from an open file-like object."""
        return cls(lambda: LineIterator(FileSource(reader, read_size=read_size),
                                        encoding=encoding, errors=errors))
