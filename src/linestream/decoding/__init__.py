"""Incremental decoding of byte chunks."""

from linestream.decoding.decoder import (
    IncrementalByteDecoder,
    Chunk,
)

__all__ = [
    "IncrementalByteDecoder",
    "Chunk",
]
