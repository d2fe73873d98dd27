"""Streaming gzip compression through an OS pipe.

A background thread reads the source file, gzip-compresses it into the
write end of a pipe, and closes the write end when done.  The consumer
(the upload) reads the compressed bytes from the read end.

Rules
-----
* The write end is closed on completion and on failure, so the consumer
  always reaches end of stream.
* A producer failure is recorded *before* the write end is closed; the
  consumer then gets :class:`~gcsblob.exceptions.CompressionError` at end
  of stream instead of a silently truncated upload.
* Leaving the context closes the read end and joins the thread.  A
  producer blocked on a full pipe is released by the broken pipe.
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import shutil
import threading
from typing import BinaryIO

from gcsblob.exceptions import CompressionError

logger = logging.getLogger(__name__)

_COPY_CHUNK_BYTES: int = 64 * 1024


class GzipPipe:
    """Context manager yielding a gzip-compressed view of *source*.

    Usage::

        with open(path, "rb") as source, GzipPipe(source) as compressed:
            service.put(compressed, "remote-blob", compressed=True)
    """

    def __init__(self, source: BinaryIO, *, compresslevel: int = 9) -> None:
        self._source = source
        self._compresslevel = compresslevel
        self._error: BaseException | None = None
        self._reported = False
        self._closing = False
        self._reader: BinaryIO | None = None
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> _PipeReader:
        read_fd, write_fd = os.pipe()
        self._reader = os.fdopen(read_fd, "rb")
        writer = os.fdopen(write_fd, "wb")
        self._thread = threading.Thread(
            target=self._produce,
            args=(writer,),
            name="gzip-pipe",
            daemon=True,
        )
        self._thread.start()
        return _PipeReader(self._reader, self)

    def __exit__(self, exc_type: object, *_args: object) -> None:
        self._closing = True
        if self._reader is not None:
            self._reader.close()
        if self._thread is not None:
            self._thread.join()
        if exc_type is None:
            self.raise_if_failed()

    # ------------------------------------------------------------------
    # Producer (background thread)
    # ------------------------------------------------------------------

    def _produce(self, writer: BinaryIO) -> None:
        try:
            with gzip.GzipFile(
                fileobj=writer,
                mode="wb",
                compresslevel=self._compresslevel,
            ) as compressor:
                shutil.copyfileobj(self._source, compressor, _COPY_CHUNK_BYTES)
        except Exception as exc:  # noqa: BLE001
            if self._closing:
                logger.debug("gzip pipe reader closed early: %s", exc)
            else:
                self._error = exc
                logger.warning("gzip failed: %s", exc)
        finally:
            try:
                writer.close()
            except OSError as exc:
                # Reader already closed; nothing left to deliver.
                logger.debug("closing gzip pipe writer: %s", exc)

    # ------------------------------------------------------------------
    # Error propagation
    # ------------------------------------------------------------------

    def raise_if_failed(self) -> None:
        """Raise :class:`CompressionError` once if the producer failed."""
        if self._error is None or self._reported:
            return
        self._reported = True
        raise CompressionError(
            f"gzip compression failed: {self._error}",
        ) from self._error


class _PipeReader(io.RawIOBase):
    """Read end of a :class:`GzipPipe` that reports producer failures."""

    def __init__(self, reader: BinaryIO, pipe: GzipPipe) -> None:
        super().__init__()
        self._reader = reader
        self._pipe = pipe

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        data = self._reader.read(size)
        # The buffered reader only returns short at end of stream.
        if size is None or size < 0 or len(data) < size:
            self._pipe.raise_if_failed()
        return data
