from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from typing import Any

from .encoder import MultipartEncoder
from .errors import NoMoreParts
from .part import Part

FileValue = Any  # bytes | str | os.PathLike | readable | (filename, content, content_type|None)


def _is_path(value: Any) -> bool:
    return isinstance(value, (str, os.PathLike))


class FormPartSource:
    """
    Lazily produce form-data parts from plain fields and files.

    `data` fields come first, then `files`. A file value can be bytes, a
    readable object, a filesystem path, or a (filename, content,
    content_type|None) tuple whose content is any of those. Paths are opened
    only when their part is requested and closed when the next part is
    requested or the form is exhausted.
    """

    def __init__(
        self,
        data: Mapping[str, str | bytes] | None = None,
        files: Mapping[str, FileValue] | None = None,
    ) -> None:
        self.data = dict(data or {})
        self.files = dict(files or {})
        self._entries = self._iter_entries()
        self._opened: Any = None

    def _iter_entries(self) -> Iterator[tuple[str, str, Any]]:
        for name, value in self.data.items():
            yield "field", name, value
        for name, value in self.files.items():
            yield "file", name, value

    def next_part(self, part: Part) -> None:
        self.close()
        try:
            kind, name, value = next(self._entries)
        except StopIteration:
            raise NoMoreParts from None
        if kind == "field":
            part.set_form_field(name, value)
            return
        filename, content, content_type = self._unpack_file(name, value)
        if _is_path(content):
            self._opened = content = open(content, "rb")
        part.set_form_file(name, filename, content, content_type)

    @staticmethod
    def _unpack_file(name: str, value: FileValue) -> tuple[str, Any, str | None]:
        if isinstance(value, tuple):
            if len(value) != 3:
                raise ValueError(
                    f"File tuple for {name!r} must be (filename, content, content_type)"
                )
            return value
        if _is_path(value):
            return os.path.basename(os.fspath(value)), value, None
        return name, value, None

    def close(self) -> None:
        """Close the file opened for the current part, if any."""
        if self._opened is not None:
            opened, self._opened = self._opened, None
            opened.close()

    def __enter__(self) -> FormPartSource:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def encode_multipart(
    data: Mapping[str, str | bytes] | None = None,
    files: Mapping[str, FileValue] | None = None,
    boundary: str = "",
) -> tuple[str, MultipartEncoder]:
    """
    Build a streaming multipart/form-data body.
    Returns the Content-Type header value and the encoder producing the body.
    """
    encoder = MultipartEncoder(provider=FormPartSource(data, files), boundary=boundary)
    return encoder.content_type, encoder
