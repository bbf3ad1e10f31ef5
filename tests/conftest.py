"""Pytest configuration and fixtures."""

import pytest
from python_multipart.multipart import MultipartParser

from oobmultipart import NoMoreParts


def decode_multipart(body: bytes, boundary: str) -> list[tuple[list[tuple[str, str]], bytes]]:
    """Split a multipart body into (headers, data) pairs with python-multipart."""
    parts: list[tuple[list[tuple[str, str]], bytes]] = []
    state: dict = {}

    def on_part_begin():
        state["headers"] = []
        state["data"] = b""
        state["field"] = b""
        state["value"] = b""

    def on_header_field(data, start, end):
        state["field"] += data[start:end]

    def on_header_value(data, start, end):
        state["value"] += data[start:end]

    def on_header_end():
        state["headers"].append((state["field"].decode(), state["value"].decode()))
        state["field"] = b""
        state["value"] = b""

    def on_part_data(data, start, end):
        state["data"] += data[start:end]

    def on_part_end():
        parts.append((state["headers"], state["data"]))

    parser = MultipartParser(
        boundary,
        {
            "on_part_begin": on_part_begin,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
            "on_part_data": on_part_data,
            "on_part_end": on_part_end,
        },
    )
    parser.write(body)
    parser.finalize()
    return parts


@pytest.fixture
def decoder():
    """Standards-conformant multipart decoder."""
    return decode_multipart


@pytest.fixture
def hello_provider():
    """Create a provider producing `count` parts with "Hello N" bodies."""

    def factory(count=3):
        state = {"i": 0}

        def provider(part):
            i = state["i"]
            if i >= count:
                raise NoMoreParts
            part.body = f"Hello {i}"
            part.headers.add("Content-Disposition", f'form-data; name="File{i}"')
            part.headers.add("Custom-Header", f"{i}")
            state["i"] += 1

        return provider

    return factory


@pytest.fixture
def fixed_random():
    """Deterministic random source for boundary generation."""
    return lambda n: bytes(range(n))
