"""Hypercomplex container codec.

Layout (little-endian, see hcx_core.protocol):

    [Magic u32 | Length u64 | Key 4*f32 | Checksum u32] + padded payload

The payload is the plaintext zero-padded to a multiple of BLOCK_SIZE and
rotated by the key. The key travels in the clear: decoding always uses the
key recorded in the header, turned around by conjugation, and a caller
key that disagrees with it is an integrity failure.
"""
from __future__ import annotations

import logging
import struct
from typing import NamedTuple

from hcx_core.errors import (
    BufferTooSmallError,
    IntegrityMismatchError,
    InvalidKeyError,
    KeyMismatchError,
    MalformedContainerError,
    require,
    require_bytes,
)
from hcx_core.protocol import BLOCK_SIZE, HEADER_FMT, HEADER_LEN, MAGIC
from hcx_core.quaternion import Quaternion, conjugate, is_valid

from .checksum import checksum
from .rotation import rotate_blocks

logger = logging.getLogger(__name__)


class ContainerHeader(NamedTuple):
    magic: int
    length: int
    key: Quaternion
    checksum: int

    def pack(self) -> bytes:
        return struct.pack(HEADER_FMT, self.magic, self.length, *self.key, self.checksum)

    @classmethod
    def unpack(cls, data: bytes) -> "ContainerHeader":
        magic, length, w, x, y, z, csum = struct.unpack_from(HEADER_FMT, data)
        return cls(magic, length, Quaternion(w, x, y, z), csum)


def padded_length(length: int) -> int:
    """Smallest multiple of BLOCK_SIZE that is >= ``length``."""
    return -(-length // BLOCK_SIZE) * BLOCK_SIZE


def required_size(length: int) -> int:
    """Container size for a plaintext of ``length`` bytes."""
    return HEADER_LEN + padded_length(length)


def _writable(out) -> memoryview:
    view = memoryview(require(out, "out")).cast("B")
    if view.readonly:
        raise TypeError("Output buffer must be writable")
    return view


def encode_into(plaintext: bytes, key: Quaternion, out) -> int:
    """Encode ``plaintext`` into the caller's buffer ``out``.

    Returns the number of bytes written. Raises BufferTooSmallError, with the
    exact required size, before touching ``out`` if it is too small.
    """
    data = require_bytes(plaintext, "plaintext")
    require(key, "key")
    view = _writable(out)

    if not is_valid(key):
        raise InvalidKeyError(f"Key components must be finite, got {key.as_tuple()}")

    total = required_size(len(data))
    if view.nbytes < total:
        raise BufferTooSmallError(total, view.nbytes)

    header = ContainerHeader(MAGIC, len(data), key, checksum(data))
    padded = data + bytes(padded_length(len(data)) - len(data))
    body = rotate_blocks(padded, key)

    view[:HEADER_LEN] = header.pack()
    view[HEADER_LEN:total] = body
    logger.debug("Encoded %d bytes into %d (checksum 0x%08x)", len(data), total, header.checksum)
    return total


def encode(plaintext: bytes, key: Quaternion) -> bytes:
    """Encode ``plaintext`` with ``key`` into a new container."""
    data = require_bytes(plaintext, "plaintext")
    out = bytearray(required_size(len(data)))
    encode_into(data, key, out)
    return bytes(out)


def read_header(container: bytes) -> ContainerHeader:
    """Parse and sanity-check the header of ``container``."""
    buf = require_bytes(container, "container")
    if len(buf) < HEADER_LEN:
        raise MalformedContainerError(
            f"Container is {len(buf)} bytes, shorter than the {HEADER_LEN}-byte header"
        )

    header = ContainerHeader.unpack(buf)
    if header.magic != MAGIC:
        raise MalformedContainerError(f"Bad magic 0x{header.magic:08x}")
    if not is_valid(header.key):
        raise MalformedContainerError(f"Header key is not finite: {header.key.as_tuple()}")

    expected = padded_length(header.length)
    actual = len(buf) - HEADER_LEN
    if actual != expected:
        raise MalformedContainerError(
            f"Payload is {actual} bytes, header length {header.length} needs {expected}"
        )
    return header


def _recover(buf: bytes, header: ContainerHeader) -> tuple[bytes, int]:
    body = rotate_blocks(buf[HEADER_LEN:], conjugate(header.key))
    plaintext = body[: header.length]
    computed = checksum(plaintext)
    logger.debug(
        "Decoded %d bytes (checksum header 0x%08x, computed 0x%08x)",
        header.length, header.checksum, computed,
    )
    return plaintext, computed


def _check(plaintext: bytes, computed: int, header: ContainerHeader, key: Quaternion) -> None:
    # Small key-field damage can leave the recovered bytes and checksum intact.
    if key != header.key:
        raise KeyMismatchError(plaintext, header.checksum, computed, key, header.key)
    if computed != header.checksum:
        raise IntegrityMismatchError(plaintext, header.checksum, computed)


def decode(container: bytes, key: Quaternion) -> bytes:
    """Recover the plaintext from ``container``.

    ``key`` must equal the key recorded in the header. Raises
    IntegrityMismatchError, carrying the unverified plaintext, when it does
    not (as KeyMismatchError) or when the checksum does not match.
    """
    buf = require_bytes(container, "container")
    require(key, "key")
    header = read_header(buf)

    plaintext, computed = _recover(buf, header)
    _check(plaintext, computed, header, key)
    return plaintext


def decode_into(container: bytes, key: Quaternion, out) -> int:
    """Recover the plaintext into the caller's buffer ``out``.

    Returns the plaintext length. On an integrity failure the unverified
    bytes are still written to ``out`` before the error is raised.
    """
    buf = require_bytes(container, "container")
    require(key, "key")
    view = _writable(out)
    header = read_header(buf)

    if view.nbytes < header.length:
        raise BufferTooSmallError(header.length, view.nbytes)

    plaintext, computed = _recover(buf, header)
    view[: header.length] = plaintext
    _check(plaintext, computed, header, key)
    return header.length
