"""Hypercomplex container protocol constants.

Single source of truth for the container magic, header layout and the
numeric constants shared by key derivation and the codec.
Keep this file stable. Encoder and decoder must remain synchronized.
"""

# Container magic (stored as little-endian u32)
MAGIC = 0xDEADBEEF

# Header: [Magic(4) | Length(8) | Key w,x,y,z (4*4) | Checksum(4)] = 32 bytes
HEADER_FMT = "<IQ4fI"
HEADER_LEN = 32

# Field offsets inside the header
LENGTH_OFFSET = 4
KEY_OFFSET = 12
CHECKSUM_OFFSET = 28

# Payload is zero-padded to a multiple of this many bytes
BLOCK_SIZE = 16
GROUP_SIZE = 4

CHECKSUM_MASK = 0xFFFFFFFF

# Quaternion tolerances
NORM_EPSILON = 1e-6  # normalize() refuses norms below this
UNIT_TOLERANCE = 1e-5

# Key derivation: 64-bit linear congruential generator
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
SEED_MASK = 0xFFFFFFFFFFFFFFFF
LCG_SAMPLE_MASK = 0xFFFF
LCG_SAMPLE_SCALE = 65535.0

# Benchmark operands
BENCH_LHS = (1.0, 2.0, 3.0, 4.0)
BENCH_RHS = (0.5, 1.5, 2.5, 3.5)
DEFAULT_BENCH_ITERATIONS = 100_000
