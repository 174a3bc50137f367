"""
Reassembly of lines across decoded text fragments.
"""

from typing import Iterator, Optional

from linestream.lines.splitter import split_lines

CR = "\r"


class LineAccumulator:
    """
    Buffer the trailing unterminated fragment between pushes.

    A trailing CR is carried forward unclassified, since the LF of a CRLF
    pair may arrive with the next fragment. The iterators returned by
    :meth:`push` and :meth:`finish` are lazy and must be exhausted before
    the accumulator is pushed again.
    """

    def __init__(self):
        self._pending: Optional[str] = None
        self._finished = False

    @property
    def pending(self) -> Optional[str]:
        """Text not yet known to be a complete line, None before any push."""
        return self._pending

    @property
    def started(self) -> bool:
        return self._pending is not None

    @property
    def finished(self) -> bool:
        return self._finished

    def push(self, fragment: str) -> Iterator[str]:
        """Append a fragment and yield every line it completes."""
        if self._finished:
            raise RuntimeError("Cannot push to a finished accumulator")

        pending = (self._pending or "") + fragment
        trailing_cr = pending.endswith(CR)

        if len(pending) <= (1 if trailing_cr else 0):
            self._pending = pending
            return

        scan_text = pending[:-1] if trailing_cr else pending
        segments = split_lines(scan_text)
        previous = next(segments)
        for segment in segments:
            yield previous
            previous = segment

        self._pending = previous + CR if trailing_cr else previous

    def finish(self, tail: str = "") -> Iterator[str]:
        """
        Yield the remaining lines at end of input.

        Pending text of exactly one CR is yielded as the literal line
        ``"\\r"``. That covers an input of a lone CR and also the CR left
        after the last complete line, so ``"a\\r\\r"`` yields ``"a"`` and
        ``"\\r"``. Longer pending text ending in CR splits normally and
        ``"a\\r"`` yields ``"a"`` and ``""``.
        """
        if self._finished:
            return
        self._finished = True

        if self._pending is None and not tail:
            return

        pending = (self._pending or "") + tail
        self._pending = ""

        if pending == CR:
            # A lone CR at end of input is kept as a one-character line
            yield pending
            return

        yield from split_lines(pending)
