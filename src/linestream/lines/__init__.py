"""Line splitting and reassembly."""

from linestream.lines.splitter import split_lines, TERMINATOR
from linestream.lines.accumulator import LineAccumulator

__all__ = [
    "split_lines",
    "TERMINATOR",
    "LineAccumulator",
]
