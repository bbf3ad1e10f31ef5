from __future__ import annotations

import os
from collections.abc import Callable

BOUNDARY_BYTES = 30

RandomBytes = Callable[[int], bytes]


def random_boundary(random_bytes: RandomBytes = os.urandom) -> str:
    """
    Generate a boundary token from BOUNDARY_BYTES random bytes.
    The result is rendered as lowercase hex (60 characters).
    """
    return random_bytes(BOUNDARY_BYTES).hex()
