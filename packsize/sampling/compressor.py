"""Streams file contents through a compressor and counts the output bytes."""

from __future__ import annotations

import lzma
import queue
import threading
from typing import Iterable, Iterator, Optional, Protocol

import zstandard

from ..config import CompressorSettings
from ..logging import get_logger

logger = get_logger("compressor")

CHUNK_SIZE = 1 << 20

_XZ_CHECKS = {
    "none": lzma.CHECK_NONE,
    "crc32": lzma.CHECK_CRC32,
    "crc64": lzma.CHECK_CRC64,
    "sha256": lzma.CHECK_SHA256,
}

_END = object()


class CompressionError(RuntimeError):
    """Raised when a compression round cannot be completed."""


class Transform(Protocol):
    def compress(self, data: bytes) -> bytes: ...

    def flush(self) -> bytes: ...


def build_transform(settings: CompressorSettings) -> Transform:
    """Create a fresh compression object for one round."""
    if settings.codec == "xz":
        preset = settings.preset | (lzma.PRESET_EXTREME if settings.extreme else 0)
        return lzma.LZMACompressor(
            format=lzma.FORMAT_XZ,
            check=_XZ_CHECKS[settings.checksum],
            preset=preset,
        )
    if settings.codec == "zstd":
        compressor = zstandard.ZstdCompressor(
            level=settings.preset,
            threads=settings.workers,
            write_checksum=settings.checksum != "none",
        )
        return compressor.compressobj()
    raise CompressionError(f"Unsupported codec: {settings.codec}")


class StreamingCompressor:
    """Compresses a sequence of byte strings and reports only the output size.

    The caller's thread produces chunks into a bounded queue while a worker
    thread feeds them to the transform. A full queue blocks the producer until
    the worker catches up, so at most ``queue_depth`` chunks are in flight.
    """

    def __init__(
        self,
        settings: CompressorSettings | None = None,
        *,
        separator: bytes = b"",
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self.settings = settings or CompressorSettings()
        self.separator = separator
        self.chunk_size = chunk_size
        if self.settings.codec == "xz" and self.settings.workers > 1:
            logger.info("xz compresses on one thread; workers=%d only applies to zstd", self.settings.workers)

    def compress(self, contents: Iterable[bytes]) -> int:
        """Return the compressed byte count of ``contents`` concatenated in order."""
        try:
            transform = build_transform(self.settings)
        except (lzma.LZMAError, zstandard.ZstdError, ValueError) as exc:
            raise CompressionError(f"Could not create {self.settings.codec} compressor: {exc}") from exc

        channel: "queue.Queue[object]" = queue.Queue(maxsize=self.settings.queue_depth)
        worker = _CountingWorker(channel, transform)
        worker.start()

        producer_error: Optional[BaseException] = None
        try:
            for chunk in self._chunks(contents):
                if not _put(channel, chunk, worker):
                    break
        except OSError as exc:
            producer_error = exc
        finally:
            _put(channel, _END, worker)
            worker.join()

        if worker.error is not None:
            raise CompressionError(f"{self.settings.codec} compression failed: {worker.error}") from worker.error
        if producer_error is not None:
            raise CompressionError(f"Could not read input: {producer_error}") from producer_error
        return worker.size

    def _chunks(self, contents: Iterable[bytes]) -> Iterator[memoryview]:
        first = True
        for data in contents:
            if self.separator and not first:
                yield memoryview(self.separator)
            first = False
            view = memoryview(data)
            for offset in range(0, len(view), self.chunk_size):
                yield view[offset:offset + self.chunk_size]


class _CountingWorker(threading.Thread):
    def __init__(self, channel: "queue.Queue[object]", transform: Transform) -> None:
        super().__init__(name="packsize-compressor", daemon=True)
        self._channel = channel
        self._transform = transform
        self.size = 0
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            while True:
                chunk = self._channel.get()
                if chunk is _END:
                    break
                self.size += len(self._transform.compress(chunk))  # type: ignore[arg-type]
            self.size += len(self._transform.flush())
        except Exception as exc:
            self.error = exc


def _put(channel: "queue.Queue[object]", item: object, worker: threading.Thread) -> bool:
    """Block until ``item`` is queued; return False if the worker has stopped."""
    while True:
        if not worker.is_alive():
            return False
        try:
            channel.put(item, timeout=0.05)
            return True
        except queue.Full:
            continue


__all__ = [
    "CHUNK_SIZE",
    "CompressionError",
    "StreamingCompressor",
    "build_transform",
]
