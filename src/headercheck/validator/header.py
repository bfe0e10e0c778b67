from __future__ import annotations

import os
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional

from src.headercheck.validator.errors import HeaderReadError

HEADER_READ_BYTES = 8192
CHARSET_SAMPLE_BYTES = 8192
CSV_SNIFF_BYTES = 4096
OFFICE_MARKER_BYTES = 1024
LEGACY_SIGNATURE_BYTES = 8
ZIP_SIGNATURE_BYTES = 4


class ByteSource:
    """Borrowed read access to the start of an uploaded file.

    Wraps either a filesystem path or a seekable binary stream owned by the
    caller. Every ``open()`` yields a handle positioned at offset 0; a borrowed
    stream is never closed here.
    """

    def __init__(self, path: Optional[str] = None, stream: Optional[BinaryIO] = None) -> None:
        if (path is None) == (stream is None):
            raise ValueError("ByteSource needs exactly one of path or stream")
        self.path = os.fspath(path) if path is not None else None
        self.stream = stream

    @classmethod
    def from_path(cls, path: "os.PathLike[str] | str") -> "ByteSource":
        return cls(path=os.fspath(path))

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "ByteSource":
        return cls(stream=stream)

    @property
    def name(self) -> str:
        if self.path is not None:
            return self.path
        return str(getattr(self.stream, "name", "<stream>"))

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        if self.stream is not None:
            self.stream.seek(0)
            yield self.stream
            return
        with open(self.path, "rb") as f:  # type: ignore[arg-type]
            yield f

    def is_empty(self) -> bool:
        if self.path is not None:
            return os.path.getsize(self.path) == 0
        return read_head(self, 1) == b""


def read_head(source: ByteSource, size: int) -> bytes:
    """Read at most ``size`` bytes from the start of ``source``.

    Short sources return fewer bytes. Reads are issued for the remaining count
    only, so nothing past ``size`` is requested from the underlying stream.
    """
    if size <= 0:
        return b""
    try:
        with source.open() as f:
            chunks = []
            remaining = size
            while remaining > 0:
                chunk = f.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
            return b"".join(chunks)
    except OSError as e:
        raise HeaderReadError(f"Failed to read file header: {source.name} ({e})") from e
