"""Rolling XOR/shift checksum.

``acc = (acc << 1) ^ byte`` with 32-bit wraparound. Detects accidental
corruption near the end of a buffer; it is not a security primitive and
collisions are easy to construct.
"""
from __future__ import annotations

from hcx_core.errors import require_bytes
from hcx_core.protocol import CHECKSUM_MASK


class Checksum:
    """Streaming form: feeding chunks gives the same value as one call."""

    def __init__(self) -> None:
        self.value = 0

    def update(self, data: bytes) -> "Checksum":
        acc = self.value
        for b in require_bytes(data, "data"):
            acc = ((acc << 1) ^ b) & CHECKSUM_MASK
        self.value = acc
        return self


def checksum(data: bytes) -> int:
    return Checksum().update(data).value
