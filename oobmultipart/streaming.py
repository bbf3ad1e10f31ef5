from __future__ import annotations

import io
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .encoder import MultipartEncoder


def read_stream(encoder: MultipartEncoder, size: int = -1) -> bytes:
    """
    Pull up to `size` bytes (everything when negative) from the encoder.
    Stops early when a non-blocking source has no data ready.
    """
    if size < 0:
        chunks: list[bytes] = []
        buf = bytearray(8192)
        while True:
            n, eof = encoder.fill(buf)
            chunks.append(bytes(buf[:n]))
            if eof or (not n and encoder.waiting_for_input):
                return b"".join(chunks)
    buf = bytearray(size)
    view = memoryview(buf)
    pos = 0
    while pos < size:
        n, eof = encoder.fill(view[pos:])
        pos += n
        if eof or (not n and encoder.waiting_for_input):
            break
    return bytes(buf[:pos])


def iter_stream(encoder: MultipartEncoder, chunk_size: int = 8192) -> Iterator[bytes]:
    """Yield non-empty chunks from the encoder until the stream ends."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    buf = bytearray(chunk_size)
    while True:
        n, eof = encoder.fill(buf)
        if n:
            yield bytes(buf[:n])
        if eof:
            return


class MultipartStream(io.RawIOBase):
    """
    Read-only file object over a MultipartEncoder.

    Transports that treat a zero-length read as end of file can consume
    this directly; `readinto` keeps pulling across part boundaries until
    bytes are available or the stream has ended. It returns None when a
    non-blocking part source has nothing ready.

    Example:
        encoder = MultipartEncoder(provider=parts)
        conn.request("POST", "/upload", body=MultipartStream(encoder),
                     headers={"Content-Type": encoder.content_type})
    """

    def __init__(self, encoder: MultipartEncoder) -> None:
        super().__init__()
        self.encoder = encoder
        self._eof = False

    @property
    def content_type(self) -> str:
        return self.encoder.content_type

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int | None:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self._eof or not len(memoryview(buffer)):
            return 0
        while True:
            n, eof = self.encoder.fill(buffer)
            if eof:
                self._eof = True
            if n or eof:
                return n
            if self.encoder.waiting_for_input:
                return None

    def __repr__(self) -> str:
        return f"<MultipartStream {self.encoder!r}>"
