"""
Stateless line splitting.
"""

import re
from typing import Iterator

TERMINATOR = re.compile(r"\r\n|\n|\r")


def split_lines(text: str) -> Iterator[str]:
    """
    Lazily split text on CRLF, LF or CR.

    Always yields at least one line: text without a terminator yields
    itself, and text ending in a terminator yields a final empty line.

    Args:
        text: Text to split

    Yields:
        Lines without their terminators, in order
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got: {type(text).__name__}")

    start = 0
    for match in TERMINATOR.finditer(text):
        yield text[start:match.start()]
        start = match.end()
    yield text[start:]
