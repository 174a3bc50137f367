"""
linestream: bounded-memory decoding of chunked byte streams into lines.

Lines are split on CRLF, LF and CR, including when a CRLF pair straddles two
chunks. Only the current partial line is buffered, sources are read on
demand, and every source is released exactly once however iteration ends.
"""

from linestream.config import LineStreamConfig, ReadSizeStrategy
from linestream.errors import (
    LineStreamError,
    UnsupportedChunkError,
    DecoderFinalizedError,
    TransformClosedError,
)
from linestream.decoding import IncrementalByteDecoder
from linestream.lines import split_lines, LineAccumulator
from linestream.sources import ByteSource, ChannelSource, as_byte_source
from linestream.streams import (
    AsyncLineIterator,
    LineIterator,
    iterate_lines,
    iter_lines,
    LineTransform,
    pipeline,
    LineStream,
)

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = [
    "LineStreamConfig",
    "ReadSizeStrategy",
    "LineStreamError",
    "UnsupportedChunkError",
    "DecoderFinalizedError",
    "TransformClosedError",
    "IncrementalByteDecoder",
    "split_lines",
    "LineAccumulator",
    "ByteSource",
    "ChannelSource",
    "as_byte_source",
    "AsyncLineIterator",
    "LineIterator",
    "iterate_lines",
    "iter_lines",
    "LineTransform",
    "pipeline",
    "LineStream",
]
