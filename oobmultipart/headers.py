from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

HeaderInput = Mapping[str, str | list[str]] | Iterable[tuple[str, str]]


class PartHeaders:
    """
    Header fields of a single multipart part.

    Names are matched case-insensitively but stored and emitted with the
    spelling used when the field was first added. Each field keeps its
    values in insertion order.
    """

    def __init__(self, headers: HeaderInput | None = None) -> None:
        # lowercased name -> (stored name, values)
        self._fields: dict[str, tuple[str, list[str]]] = {}
        if headers:
            self.update(headers)

    def add(self, name: str, value: str) -> None:
        """Append a value to the field, creating it if needed."""
        key = name.lower()
        if key in self._fields:
            self._fields[key][1].append(value)
        else:
            self._fields[key] = (name, [value])

    def set(self, name: str, value: str) -> None:
        """Replace all values of the field with a single value."""
        key = name.lower()
        stored = self._fields[key][0] if key in self._fields else name
        self._fields[key] = (stored, [value])

    def update(self, headers: HeaderInput) -> None:
        if isinstance(headers, PartHeaders):
            for name, value in headers.items():
                self.add(name, value)
            return
        if isinstance(headers, Mapping):
            for name, value in headers.items():
                if isinstance(value, str):
                    self.add(name, value)
                else:
                    for item in value:
                        self.add(name, item)
            return
        for name, value in headers:
            self.add(name, value)

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of the field."""
        entry = self._fields.get(name.lower())
        if entry is None:
            return default
        return entry[1][0]

    def get_all(self, name: str) -> list[str]:
        entry = self._fields.get(name.lower())
        return list(entry[1]) if entry else []

    def delete(self, name: str) -> None:
        self._fields.pop(name.lower(), None)

    def items(self) -> list[tuple[str, str]]:
        """All (name, value) pairs in insertion order."""
        return [(name, value) for name, values in self._fields.values() for value in values]

    def sorted_items(self) -> list[tuple[str, str]]:
        """All (name, value) pairs with names in lexicographic order."""
        ordered: list[tuple[str, str]] = []
        for name, values in sorted(self._fields.values(), key=lambda entry: entry[0]):
            ordered.extend((name, value) for value in values)
        return ordered

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._fields

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PartHeaders):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"<PartHeaders {self.items()!r}>"


def build_header_fragment(boundary: str, headers: PartHeaders, index: int) -> bytes:
    """
    Build the delimiter and header block that precedes part `index`.
    The first part has no leading CRLF; later parts close the previous body with one.
    """
    lines = [f"--{boundary}\r\n" if index == 0 else f"\r\n--{boundary}\r\n"]
    for name, value in headers.sorted_items():
        lines.append(f"{name}: {value}\r\n")
    lines.append("\r\n")
    return "".join(lines).encode("utf-8")


def build_final_fragment(boundary: str) -> bytes:
    return f"\r\n--{boundary}--".encode("utf-8")
