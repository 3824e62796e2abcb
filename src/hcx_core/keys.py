"""Deterministic key derivation."""
from __future__ import annotations

import numpy as np

from .errors import InvalidKeyError, require
from .protocol import (
    LCG_INCREMENT,
    LCG_MULTIPLIER,
    LCG_SAMPLE_MASK,
    LCG_SAMPLE_SCALE,
    SEED_MASK,
)
from .quaternion import Quaternion, is_valid, normalize


def _lcg_step(state: int) -> int:
    return (state * LCG_MULTIPLIER + LCG_INCREMENT) & SEED_MASK


def _lcg_sample(state: int) -> float:
    """Map the low 16 bits of ``state`` onto [-1, 1] in binary32."""
    v = np.float32(state & LCG_SAMPLE_MASK) / np.float32(LCG_SAMPLE_SCALE)
    return float(v * np.float32(2.0) - np.float32(1.0))


def generate_key(seed: int) -> Quaternion:
    """Derive a unit quaternion key from an unsigned 64-bit seed.

    The same seed always yields the same key. Raises DivideByZeroError if the
    raw draw has (numerically) zero norm.
    """
    require(seed, "seed")
    if not 0 <= seed <= SEED_MASK:
        raise ValueError(f"Seed must be an unsigned 64-bit integer, got {seed}")

    state = seed
    raw = []
    for _ in range(4):
        state = _lcg_step(state)
        raw.append(_lcg_sample(state))

    return normalize(Quaternion(*raw))


def key_from_components(w: float, x: float, y: float, z: float) -> Quaternion:
    """Build an explicit key, rejecting NaN and infinite components."""
    key = Quaternion(w, x, y, z)
    if not is_valid(key):
        raise InvalidKeyError(f"Key components must be finite, got {key.as_tuple()}")
    return key


def parse_key(text: str) -> Quaternion:
    """Parse ``"w,x,y,z"`` into a key."""
    require(text, "text")
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 4:
        raise InvalidKeyError(f"Key needs 4 comma-separated components, got {len(parts)}")
    try:
        values = [float(p) for p in parts]
    except ValueError as e:
        raise InvalidKeyError(f"Key component is not a number: {e}") from e
    return key_from_components(*values)
