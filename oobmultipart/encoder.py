from __future__ import annotations

import enum
import logging
import os
from collections.abc import Iterator
from typing import Any

from .boundary import RandomBytes, random_boundary
from .errors import MissingProviderError, NoMoreParts
from .headers import build_final_fragment, build_header_fragment
from .part import ByteSource, Part
from .source import PartSource, as_part_source
from .streaming import iter_stream, read_stream

logger = logging.getLogger(__name__)


class EncoderState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    NEXT_PART = "next_part"
    HEADER = "header"
    BODY = "body"
    FINAL = "final"


class _Fragment:
    """A small in-memory byte fragment drained across fill calls."""

    __slots__ = ("data", "offset")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def drain(self, out: memoryview) -> int:
        n = min(len(out), len(self.data) - self.offset)
        out[:n] = self.data[self.offset : self.offset + n]
        self.offset += n
        return n

    @property
    def empty(self) -> bool:
        return self.offset >= len(self.data)


class MultipartEncoder:
    """
    Incremental multipart/form-data encoder.

    Parts are pulled from the provider one at a time and their bodies are
    streamed through without buffering. Call `fill` repeatedly with a
    destination buffer, or use `read` / `iter_bytes`.

    Args:
        provider: PartSource, `func(part)` callback, or iterable of parts
        boundary: Boundary string; generated on first use when empty
        random_bytes: Random source used for boundary generation

    Example:
        encoder = MultipartEncoder(provider=parts)
        headers = {"Content-Type": encoder.content_type}
        for chunk in encoder.iter_bytes():
            send(chunk)
    """

    def __init__(
        self,
        provider: Any = None,
        boundary: str = "",
        random_bytes: RandomBytes = os.urandom,
    ) -> None:
        self._provider: PartSource | None = as_part_source(provider)
        self._boundary = boundary
        self.random_bytes = random_bytes
        self._written_parts = 0
        self._state = EncoderState.UNINITIALIZED
        # Fragment for HEADER/FINAL, source for HEADER/BODY; unset otherwise.
        self._fragment: _Fragment | None = None
        self._source: ByteSource | None = None
        # Source error raised after bytes were written in the same call; raised by the next fill.
        self._pending_error: BaseException | None = None
        self._waiting = False

    @property
    def boundary(self) -> str:
        return self._boundary

    @boundary.setter
    def boundary(self, value: str) -> None:
        self._ensure_idle("boundary")
        self._boundary = value

    @property
    def provider(self) -> PartSource | None:
        return self._provider

    @provider.setter
    def provider(self, value: Any) -> None:
        self._ensure_idle("provider")
        self._provider = as_part_source(value)

    @property
    def content_type(self) -> str:
        """Content-Type header value; generates the boundary if still unset."""
        if not self._boundary:
            self._boundary = random_boundary(self.random_bytes)
        return f"multipart/form-data; boundary={self._boundary}"

    @property
    def written_parts(self) -> int:
        """Number of parts whose header block has been fully written."""
        return self._written_parts

    @property
    def state(self) -> EncoderState:
        return self._state

    @property
    def waiting_for_input(self) -> bool:
        """True when the last fill stopped because the part's source had no data ready."""
        return self._waiting

    def reset(self, provider: Any = None, boundary: str = "") -> None:
        """
        Re-arm for a new stream, discarding any stream in progress.
        The previous provider is closed if it has a `close` method.
        """
        close = getattr(self._provider, "close", None)
        if close is not None:
            close()
        self._pending_error = None
        self._waiting = False
        self._provider = as_part_source(provider)
        self._boundary = boundary
        self._set_state(EncoderState.UNINITIALIZED)

    def _ensure_idle(self, name: str) -> None:
        if self._state is not EncoderState.UNINITIALIZED:
            raise RuntimeError(f"Cannot change {name} while a stream is in progress")

    def _set_state(
        self,
        state: EncoderState,
        fragment: _Fragment | None = None,
        source: ByteSource | None = None,
    ) -> None:
        self._state = state
        self._fragment = fragment
        self._source = source

    def _initialize(self) -> None:
        if not self._boundary:
            self._boundary = random_boundary(self.random_bytes)
        if self._provider is None:
            raise MissingProviderError()
        self._written_parts = 0
        self._set_state(EncoderState.NEXT_PART)
        logger.debug("starting multipart stream with boundary %s", self._boundary)

    def fill(self, buffer: Any) -> tuple[int, bool]:
        """
        Write the next ready bytes of the stream into `buffer`.

        Returns (bytes_written, eof). A result of (0, False) is normal at
        part boundaries and means "call again". Exceptions from the
        provider or from a part's source propagate unchanged.
        """
        self._waiting = False
        if self._pending_error is not None:
            error, self._pending_error = self._pending_error, None
            raise error
        if self._state is EncoderState.UNINITIALIZED:
            self._initialize()

        out = memoryview(buffer).cast("B")
        if not out:
            return 0, False

        if self._state is EncoderState.NEXT_PART:
            self._next_part()

        if self._state is EncoderState.FINAL:
            return self._write_final(out)

        written = 0
        if self._state is EncoderState.HEADER:
            written = self._write_header(out)
            if self._state is EncoderState.HEADER or written == len(out):
                return written, False

        if not written:
            return self._write_body(out), False
        try:
            return written + self._write_body(out[written:]), False
        except Exception as e:
            self._pending_error = e
            return written, False

    def _next_part(self) -> None:
        assert self._provider is not None
        part = Part()
        try:
            self._provider.next_part(part)
        except NoMoreParts:
            logger.debug("multipart stream complete after %d parts", self._written_parts)
            self._set_state(EncoderState.FINAL, _Fragment(build_final_fragment(self._boundary)))
            return
        header = build_header_fragment(self._boundary, part.headers, self._written_parts)
        logger.debug("starting part %d", self._written_parts)
        self._set_state(EncoderState.HEADER, _Fragment(header), part.body)

    def _write_header(self, out: memoryview) -> int:
        assert self._fragment is not None
        n = self._fragment.drain(out)
        if self._fragment.empty:
            self._written_parts += 1
            self._set_state(EncoderState.BODY, source=self._source)
        return n

    def _write_body(self, out: memoryview) -> int:
        assert self._source is not None
        n = self._source.readinto(out)
        if n is None:
            self._waiting = True
            return 0
        if n == 0:
            # Source exhausted; the next fill asks the provider for another part.
            self._set_state(EncoderState.NEXT_PART)
        return n

    def _write_final(self, out: memoryview) -> tuple[int, bool]:
        assert self._fragment is not None
        n = self._fragment.drain(out)
        if self._fragment.empty:
            self._set_state(EncoderState.UNINITIALIZED)
            return n, True
        return n, False

    def read(self, size: int = -1) -> bytes:
        """
        Read up to `size` bytes of the stream (all remaining bytes when
        negative). Returns fewer bytes only at the end of the stream or when
        a non-blocking part source has nothing ready.
        """
        return read_stream(self, size)

    def iter_bytes(self, chunk_size: int = 8192) -> Iterator[bytes]:
        """
        Iterate over the stream in chunks of at most `chunk_size` bytes.

        Yields:
            Non-empty byte chunks until the final boundary has been written
        """
        return iter_stream(self, chunk_size)

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_bytes()

    def __repr__(self) -> str:
        return (
            f"<MultipartEncoder state={self._state.value} "
            f"boundary={self._boundary!r} parts={self._written_parts}>"
        )
