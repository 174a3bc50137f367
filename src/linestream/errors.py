"""Exceptions raised by line streaming."""


class LineStreamError(Exception):
    """Base class for line streaming errors."""


class UnsupportedChunkError(LineStreamError, TypeError):
    """A chunk is neither text nor raw bytes."""

    def __init__(self, chunk: object):
        self.chunk_type = type(chunk)
        super().__init__(
            f"Expected bytes, bytearray, memoryview or str chunk, got: {self.chunk_type.__name__}"
        )


class DecoderFinalizedError(LineStreamError, RuntimeError):
    """Data was fed to a decoder after end of input."""


class TransformClosedError(LineStreamError, RuntimeError):
    """Bytes were written to a transform that no longer accepts them."""
