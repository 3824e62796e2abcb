"""Hypercomplex Pack - Container codec built on the quaternion core."""
from .bench import PerfStats, benchmark
from .checksum import Checksum, checksum
from .container import (
    ContainerHeader,
    decode,
    decode_into,
    encode,
    encode_into,
    padded_length,
    read_header,
    required_size,
)
from .rotation import rotate_blocks

__all__ = [
    "Checksum",
    "checksum",
    "rotate_blocks",
    "ContainerHeader",
    "padded_length",
    "required_size",
    "encode",
    "encode_into",
    "decode",
    "decode_into",
    "read_header",
    "PerfStats",
    "benchmark",
]
