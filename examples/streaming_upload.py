#!/usr/bin/env python3
"""
Example: Upload files as multipart/form-data without loading them into memory.

Files are opened one at a time while the request body is being sent, using
chunked transfer encoding since the total size is not known up front.
"""
from __future__ import annotations

import http.client
import sys
from urllib.parse import urlparse

import click

from oobmultipart import encode_multipart


def upload(url: str, paths: list[str]) -> None:
    parsed = urlparse(url)
    files = {f"file{i}": path for i, path in enumerate(paths)}
    content_type, encoder = encode_multipart({"source": "oobmultipart"}, files)

    conn_cls = http.client.HTTPSConnection if parsed.scheme == "https" else http.client.HTTPConnection
    conn = conn_cls(parsed.hostname or "", parsed.port)
    try:
        conn.request(
            "POST",
            parsed.path or "/",
            body=encoder.iter_bytes(chunk_size=16384),
            headers={"Content-Type": content_type},
            encode_chunked=True,
        )
        response = conn.getresponse()
        response.read()
    finally:
        conn.close()

    color = "green" if response.status < 400 else "red"
    click.secho(f"Upload status: {response.status} ({encoder.written_parts} parts)", fg=color)


if __name__ == "__main__":
    if len(sys.argv) < 3:
        click.secho("usage: streaming_upload.py URL FILE [FILE ...]", fg="yellow")
        sys.exit(1)
    upload(sys.argv[1], sys.argv[2:])
