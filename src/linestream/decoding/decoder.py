"""
Incremental decoding of byte chunks into text.
"""

import codecs
from typing import Optional, Union

from linestream.config import config
from linestream.errors import DecoderFinalizedError, UnsupportedChunkError

Chunk = Union[bytes, bytearray, memoryview, str]

RAW_TYPES = (bytes, bytearray, memoryview)


class IncrementalByteDecoder:
    """
    Decode a sequence of chunks without splitting multi-byte sequences.

    Bytes belonging to an incomplete sequence are kept by the underlying
    codec and prefixed to the next raw chunk. Text chunks pass through
    unchanged once any pending bytes have been flushed.
    """

    def __init__(self, encoding: Optional[str] = None, errors: Optional[str] = None):
        """
        Initialize decoder.

        Args:
            encoding: Codec name (None for config default)
            errors: Codec error handler (None for config default)
        """
        self.encoding = encoding or config.encoding
        self.errors = errors or config.errors
        self._factory = codecs.getincrementaldecoder(self.encoding)
        self._decoder: Optional[codecs.IncrementalDecoder] = None
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def in_progress(self) -> bool:
        """True while a raw byte sequence is being decoded."""
        return self._decoder is not None

    def feed(self, chunk: Chunk) -> str:
        """Decode one chunk and return whatever text is complete."""
        if self._finalized:
            raise DecoderFinalizedError("Cannot feed a finalized decoder")

        if isinstance(chunk, str):
            # Pending bytes are flushed before text is appended
            return self._flush() + chunk

        if isinstance(chunk, RAW_TYPES):
            if self._decoder is None:
                self._decoder = self._factory(self.errors)
            return self._decoder.decode(bytes(chunk), final=False)

        raise UnsupportedChunkError(chunk)

    def finalize(self) -> str:
        """Flush the decoder at end of input."""
        if self._finalized:
            raise DecoderFinalizedError("Decoder already finalized")
        self._finalized = True
        return self._flush()

    def _flush(self) -> str:
        if self._decoder is None:
            return ""
        decoder, self._decoder = self._decoder, None
        return decoder.decode(b"", final=True)
