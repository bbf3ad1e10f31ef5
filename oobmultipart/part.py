from __future__ import annotations

import io
from typing import Any, Protocol

from .headers import HeaderInput, PartHeaders

DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"


class ByteSource(Protocol):
    """
    Pull-based byte source attached to a part.

    `readinto` returns the number of bytes written, 0 at end of input, or
    None when a non-blocking source has nothing ready yet.
    """

    def readinto(self, buffer: Any) -> int | None: ...


class _ReadAdapter:
    """Expose `readinto` for objects that only implement `read(n)`."""

    def __init__(self, raw: Any) -> None:
        self.raw = raw
        # Encoded bytes that did not fit the previous buffer.
        self._pending = b""
        self._offset = 0

    def readinto(self, buffer: Any) -> int | None:
        view = memoryview(buffer).cast("B")
        if self._offset >= len(self._pending):
            data = self.raw.read(len(view))
            if data is None:
                return None
            if isinstance(data, str):
                data = data.encode("utf-8")
            self._pending, self._offset = data, 0
        n = min(len(view), len(self._pending) - self._offset)
        view[:n] = self._pending[self._offset : self._offset + n]
        self._offset += n
        return n

    def close(self) -> None:
        close = getattr(self.raw, "close", None)
        if close is not None:
            close()


def as_byte_source(body: Any) -> ByteSource:
    """Adapt a body value to a `readinto`-capable byte source."""
    if body is None:
        return io.BytesIO(b"")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(body))
    if isinstance(body, str):
        return io.BytesIO(body.encode("utf-8"))
    if hasattr(body, "readinto"):
        return body
    if hasattr(body, "read"):
        return _ReadAdapter(body)
    raise TypeError(f"Unsupported part body type: {type(body).__name__}")


class Part:
    """
    One section of a multipart body: its header fields and a byte source.

    The encoder hands a fresh, empty Part to the provider for every section;
    the provider fills in `headers` and `body`.
    """

    def __init__(self, headers: HeaderInput | None = None, body: Any = None) -> None:
        self.headers = PartHeaders(headers)
        self._body: ByteSource = as_byte_source(body)

    @property
    def body(self) -> ByteSource:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        self._body = as_byte_source(value)

    def set_form_field(self, name: str, value: str | bytes) -> None:
        self.headers.set("Content-Disposition", f'form-data; name="{name}"')
        self.body = value

    def set_form_file(
        self,
        name: str,
        filename: str,
        body: Any,
        content_type: str | None = None,
    ) -> None:
        """
        Describe an uploaded file. `content_type` defaults to
        application/octet-stream.
        """
        self.headers.set(
            "Content-Disposition", f'form-data; name="{name}"; filename="{filename}"'
        )
        self.headers.set("Content-Type", content_type or DEFAULT_FILE_CONTENT_TYPE)
        self.body = body

    def __repr__(self) -> str:
        return f"<Part {self.headers.items()!r}>"
