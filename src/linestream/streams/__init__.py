"""Pull and push front-ends turning byte sources into lines."""

from linestream.streams.iterator import (
    AsyncLineIterator,
    LineIterator,
    iterate_lines,
    iter_lines,
)
from linestream.streams.transform import LineTransform
from linestream.streams.pipeline import pipeline
from linestream.streams.stream import LineStream

__all__ = [
    "AsyncLineIterator",
    "LineIterator",
    "iterate_lines",
    "iter_lines",
    "LineTransform",
    "pipeline",
    "LineStream",
]
