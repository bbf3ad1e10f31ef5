#!/usr/bin/env python3
"""
Example: Produce parts on the fly from a PartSource and read the body
with a tiny buffer.
"""
from __future__ import annotations

import io

import click

from oobmultipart import MultipartEncoder, NoMoreParts, Part


class ReportParts:
    """Generates one CSV report per region, computed only when requested."""

    def __init__(self, regions: list[str]) -> None:
        self.regions = list(regions)

    def next_part(self, part: Part) -> None:
        if not self.regions:
            raise NoMoreParts
        region = self.regions.pop(0)
        rows = "\n".join(f"{region},{day},{day * 7}" for day in range(1, 4))
        part.set_form_file(region, f"{region}.csv", io.StringIO(rows), "text/csv")
        part.headers.add("X-Region", region)


def main() -> None:
    encoder = MultipartEncoder(provider=ReportParts(["north", "south"]), boundary="ExampleBoundary")
    click.secho(f"Content-Type: {encoder.content_type}", fg="cyan")

    body = bytearray()
    buf = bytearray(7)
    while True:
        n, eof = encoder.fill(buf)
        body += buf[:n]
        if eof:
            break

    click.echo(body.decode())
    click.secho(f"\n{encoder.written_parts} parts, {len(body)} bytes", fg="green")


if __name__ == "__main__":
    main()
