"""Tests for packsize.sampling.compressor."""

from __future__ import annotations

import logging
import lzma
from typing import Iterator

import pytest

from packsize.config import CompressorSettings
from packsize.sampling import CompressionError, StreamingCompressor
from packsize.sampling import compressor as compressor_module


def _xz_size(data: bytes, preset: int = 9) -> int:
    return len(lzma.compress(data, format=lzma.FORMAT_XZ, check=lzma.CHECK_NONE, preset=preset))


def test_size_matches_one_shot_compression() -> None:
    contents = [b"hello", b"world!"]

    size = StreamingCompressor().compress(contents)

    assert size == _xz_size(b"helloworld!")


def test_size_depends_only_on_concatenated_bytes() -> None:
    compressor = StreamingCompressor()

    assert compressor.compress([b"hello", b"world!"]) == compressor.compress([b"hellowor", b"ld!"])
    assert compressor.compress([b"abc"] * 3) == compressor.compress([b"abc"] * 3)


def test_separator_is_inserted_between_files() -> None:
    size = StreamingCompressor(separator=b"\n").compress([b"one", b"two", b"three"])

    assert size == _xz_size(b"one\ntwo\nthree")


def test_empty_input_produces_header_only_size() -> None:
    size = StreamingCompressor().compress([])

    assert size == _xz_size(b"")
    assert 0 < size < 64


def test_large_input_is_chunked_through_bounded_queue() -> None:
    data = bytes(range(256)) * 4096
    settings = CompressorSettings(preset=1, queue_depth=1)

    size = StreamingCompressor(settings, chunk_size=1024).compress([data, data])

    assert size == _xz_size(data + data, preset=1)


def test_zstd_codec_counts_output() -> None:
    settings = CompressorSettings(codec="zstd", preset=3, workers=2)
    compressor = StreamingCompressor(settings)

    small = compressor.compress([b"a" * 10])
    large = compressor.compress([bytes(range(256)) * 64])

    assert small > 0
    assert large > small


def test_transform_failure_is_fatal(monkeypatch) -> None:
    class BrokenTransform:
        def compress(self, data):
            raise lzma.LZMAError("boom")

        def flush(self) -> bytes:
            return b""

    monkeypatch.setattr(compressor_module, "build_transform", lambda settings: BrokenTransform())

    with pytest.raises(CompressionError, match="boom"):
        StreamingCompressor(CompressorSettings(queue_depth=1), chunk_size=1).compress([b"abcdef" * 100])


def test_read_failure_during_round_is_fatal() -> None:
    def contents() -> Iterator[bytes]:
        yield b"first"
        raise FileNotFoundError(2, "No such file or directory")

    with pytest.raises(CompressionError, match="No such file"):
        StreamingCompressor().compress(contents())


def test_default_xz_settings_use_one_worker(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("packsize"), "propagate", True)
    with caplog.at_level(logging.INFO, logger="packsize"):
        StreamingCompressor()

    assert CompressorSettings().workers == 1
    assert "one thread" not in caplog.text


def test_xz_with_workers_reports_single_thread(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("packsize"), "propagate", True)
    with caplog.at_level(logging.INFO, logger="packsize"):
        StreamingCompressor(CompressorSettings(workers=4))

    assert "xz compresses on one thread; workers=4" in caplog.text
