#!/usr/bin/env python3
"""
Tests for lazy line streams, configuration and memory use.
"""

import gc
import io
import os
import shutil
import tempfile
import unittest

import psutil

from linestream import LineStream, LineStreamConfig, ReadSizeStrategy, iter_lines
from linestream.config import config


class TestLineStream(unittest.TestCase):
    """Test stream factories and terminals."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def counting_chunks(self, state):
        def produce():
            try:
                for i in range(1000):
                    state["produced"] = i + 1
                    yield f"record {i}\n".encode()
            finally:
                state["closed"] = True
        return produce

    def test_collect(self):
        """Test collecting every line."""
        stream = LineStream.from_chunks([b"a\r\nb", b"\rc\n"])
        self.assertEqual(stream.collect(), ["a", "b", "c", ""])
        self.assertEqual(stream.count(), 4)

    def test_take_stops_reading(self):
        """Test take releases the source without reading ahead."""
        state = {}
        stream = LineStream.from_chunks(self.counting_chunks(state))

        self.assertEqual(stream.take(3).collect(), ["record 0", "record 1", "record 2"])
        self.assertEqual(state["produced"], 3)
        self.assertTrue(state["closed"])

    def test_take_limits(self):
        """Test repeated and out of range limits."""
        stream = LineStream.from_chunks(lambda: [b"1\n2\n3\n4\n5"])

        self.assertEqual(stream.take(4).take(2).collect(), ["1", "2"])
        self.assertEqual(stream.take(2).take(4).collect(), ["1", "2"])
        self.assertEqual(stream.take(10).count(), 5)
        self.assertEqual(stream.take(0).collect(), [])
        self.assertEqual(stream.take(-1).collect(), [])
        self.assertIsNone(stream.take(0).first())

    def test_take_zero_opens_nothing(self):
        """Test an empty limit never creates an iterator."""
        opened = []

        def opener():
            opened.append(True)
            return iter_lines([b"x\n"])

        self.assertEqual(LineStream(opener).take(0).collect(), [])
        self.assertEqual(opened, [])

    def test_first(self):
        """Test first reads a single line."""
        state = {}
        stream = LineStream.from_chunks(self.counting_chunks(state))

        self.assertEqual(stream.first(), "record 0")
        self.assertEqual(state["produced"], 1)
        self.assertTrue(state["closed"])
        self.assertIsNone(LineStream.from_chunks([]).first())

    def test_reiterable(self):
        """Test every iteration reads the source from the start."""
        stream = LineStream.from_chunks(lambda: ["x\ny\n"])
        self.assertEqual(list(stream), ["x", "y", ""])
        self.assertEqual(list(stream), ["x", "y", ""])

    def test_opener_must_be_callable(self):
        """Test streams are built from an opener."""
        with self.assertRaises(TypeError):
            LineStream([b"not callable"])

    def test_file_round_trip(self):
        """Test writing lines to a file and reading them back."""
        path = os.path.join(self.temp_dir, "lines.txt")
        written = LineStream.from_chunks([b"alpha\r\nbeta\rgamma"]).to_file(path, newline="\r\n")
        self.assertEqual(written, 3)

        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"alpha\r\nbeta\r\ngamma\r\n")

        stream = LineStream.from_file(path, read_size=4)
        self.assertEqual(stream.collect(), ["alpha", "beta", "gamma", ""])
        # Each iteration reopens the file
        self.assertEqual(stream.take(3).count(), 3)

    def test_from_file_encoding(self):
        """Test files in other encodings."""
        path = os.path.join(self.temp_dir, "latin.txt")
        with open(path, "wb") as f:
            f.write("na\xefve\ncaf\xe9".encode("latin-1"))

        self.assertEqual(LineStream.from_file(path, encoding="latin-1").collect(),
                         ["na\xefve", "caf\xe9"])

    def test_from_reader(self):
        """Test an already open reader is consumed and closed."""
        reader = io.BytesIO(b"one\ntwo\nthree")
        stream = LineStream.from_reader(reader, read_size=5)

        self.assertEqual(stream.collect(), ["one", "two", "three"])
        self.assertTrue(reader.closed)


class TestConfig(unittest.TestCase):
    """Test configuration defaults."""

    def tearDown(self):
        """Restore configuration defaults."""
        LineStreamConfig.set_defaults(
            encoding="utf-8",
            errors="strict",
            read_strategy=ReadSizeStrategy.FIXED,
            fixed_read_size=64 * 1024,
        )

    def test_singleton(self):
        """Test the module instance is the shared instance."""
        self.assertIs(LineStreamConfig.get_instance(), config)

    def test_fixed_read_size(self):
        """Test fixed read sizes are clamped to the configured bounds."""
        LineStreamConfig.set_defaults(fixed_read_size=10)
        self.assertEqual(config.calculate_read_size(), config.min_read_size)

        LineStreamConfig.set_defaults(fixed_read_size=8192)
        self.assertEqual(config.calculate_read_size(), 8192)

    def test_memory_based_read_size(self):
        """Test memory based read sizes stay within bounds."""
        LineStreamConfig.set_defaults(read_strategy="memory_based")
        self.assertEqual(config.read_strategy, ReadSizeStrategy.MEMORY_BASED)

        read_size = config.calculate_read_size()
        self.assertGreaterEqual(read_size, config.min_read_size)
        self.assertLessEqual(read_size, config.max_read_size)

    def test_unknown_encoding(self):
        """Test unknown codecs are refused."""
        with self.assertRaises(LookupError):
            LineStreamConfig.set_defaults(encoding="no-such-codec")
        with self.assertRaises(LookupError):
            LineStreamConfig(encoding="no-such-codec")
        self.assertEqual(config.encoding, "utf-8")

    def test_default_encoding_used(self):
        """Test iterators pick up the configured encoding."""
        LineStreamConfig.set_defaults(encoding="latin-1")
        self.assertEqual(list(iter_lines([b"caf\xe9"])), ["caf\xe9"])


class TestMemoryUse(unittest.TestCase):
    """Test that memory stays bounded by the longest line, not the input."""

    def setUp(self):
        """Set up test environment."""
        self.process = psutil.Process()

    def test_large_input_bounded_memory(self):
        """Test counting lines of ~20MB of input."""
        chunk = b"0123456789\n" * 6000

        def produce():
            for _ in range(300):
                yield chunk

        gc.collect()
        initial_memory = self.process.memory_info().rss

        count = LineStream.from_chunks(produce).count()
        peak_memory = self.process.memory_info().rss

        self.assertEqual(count, 300 * 6000 + 1)
        memory_increase = (peak_memory - initial_memory) / 1024 / 1024
        self.assertLess(memory_increase, 50)


if __name__ == "__main__":
    unittest.main()
