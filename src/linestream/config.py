"""
Configuration management for line streaming.
"""

import codecs
from typing import ClassVar, Optional
from dataclasses import dataclass
from enum import Enum

import psutil


class ReadSizeStrategy(Enum):
    """Strategy for choosing how many bytes a reader source asks for at once."""
    FIXED = "fixed"
    MEMORY_BASED = "memory_based"


@dataclass
class LineStreamConfig:
    """Global defaults for decoders, iterators and transforms."""

    # Decoding
    encoding: str = "utf-8"
    errors: str = "strict"

    # Reads
    read_strategy: ReadSizeStrategy = ReadSizeStrategy.FIXED
    fixed_read_size: int = 64 * 1024
    min_read_size: int = 4 * 1024
    max_read_size: int = 1024 * 1024

    # Backpressure
    channel_capacity: int = 1  # Byte chunks accepted ahead of the drive loop
    line_buffer: int = 16      # Lines queued on the transform's readable side

    _instance: ClassVar[Optional['LineStreamConfig']] = None

    def __post_init__(self):
        """Validate the configured encoding."""
        codecs.lookup(self.encoding)

    @classmethod
    def get_instance(cls) -> 'LineStreamConfig':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_defaults(cls, **kwargs) -> None:
        """Set default configuration values."""
        instance = cls.get_instance()
        for key, value in kwargs.items():
            if key == "read_strategy" and isinstance(value, str):
                value = ReadSizeStrategy(value)
            if key == "encoding":
                codecs.lookup(value)
            if hasattr(instance, key):
                setattr(instance, key, value)

    def calculate_read_size(self) -> int:
        """Calculate the read size based on strategy."""
        if self.read_strategy == ReadSizeStrategy.MEMORY_BASED:
            available = psutil.virtual_memory().available
            # A single read never takes more than 0.1% of available memory
            read_size = int(available * 0.001)
            return max(self.min_read_size, min(read_size, self.max_read_size))

        return max(self.min_read_size, min(self.fixed_read_size, self.max_read_size))


# Global configuration instance
config = LineStreamConfig.get_instance()
