from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Protocol, runtime_checkable

from .errors import NoMoreParts
from .part import Part


@runtime_checkable
class PartSource(Protocol):
    """
    Supplies the parts of a multipart stream, one per call.

    `next_part` populates the given empty part, or raises NoMoreParts once
    every part has been produced. Any other exception aborts the stream and
    reaches the reader unchanged.
    """

    def next_part(self, part: Part) -> None: ...


class CallbackPartSource:
    """Adapt a plain `func(part)` callback to the PartSource interface."""

    def __init__(self, func: Callable[[Part], None]) -> None:
        self.func = func

    def next_part(self, part: Part) -> None:
        self.func(part)

    def __repr__(self) -> str:
        return f"<CallbackPartSource {self.func!r}>"


class IterablePartSource:
    """
    Feed parts from an iterable of Part objects or (headers, body) pairs.
    Items are pulled one at a time, so generators stay lazy.
    """

    def __init__(self, parts: Iterable[Part | tuple[Any, Any]]) -> None:
        self._parts: Iterator[Part | tuple[Any, Any]] = iter(parts)

    def next_part(self, part: Part) -> None:
        try:
            item = next(self._parts)
        except StopIteration:
            raise NoMoreParts from None
        if isinstance(item, Part):
            part.headers.update(item.headers)
            part.body = item.body
        else:
            headers, body = item
            part.headers.update(headers)
            part.body = body


def as_part_source(provider: Any) -> PartSource | None:
    """
    Normalize a provider value: PartSource objects pass through, callables
    become CallbackPartSource and iterables become IterablePartSource.
    """
    if provider is None or isinstance(provider, PartSource):
        return provider
    if callable(provider):
        return CallbackPartSource(provider)
    if isinstance(provider, Iterable) and not isinstance(provider, (str, bytes)):
        return IterablePartSource(provider)
    raise TypeError(f"Unsupported part provider type: {type(provider).__name__}")
