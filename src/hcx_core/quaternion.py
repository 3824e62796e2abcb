"""Quaternion algebra on single-precision values.

A quaternion ``w + xi + yj + zk`` is stored as four binary32 components so
that a value written into a container header reads back bit-for-bit. The
product is the Hamilton product: associative, not commutative, with
``i*j = k`` and ``j*i = -k``.

All operations are pure. Arguments are never mutated and every result is a
new value.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .errors import DivideByZeroError, require
from .protocol import NORM_EPSILON, UNIT_TOLERANCE


def _as_f32(*values: float) -> list[float]:
    # Out-of-range values saturate to +/-inf like a C float cast.
    with np.errstate(over="ignore"):
        return np.asarray(values, dtype=np.float64).astype(np.float32).tolist()


@dataclass(frozen=True, slots=True)
class Quaternion:
    w: float
    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        w, x, y, z = _as_f32(self.w, self.x, self.y, self.z)
        object.__setattr__(self, "w", w)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "z", z)

    def __iter__(self) -> Iterator[float]:
        return iter((self.w, self.x, self.y, self.z))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.w, self.x, self.y, self.z)

    def __add__(self, other: Quaternion) -> Quaternion:
        return add(self, other)

    def __mul__(self, other: Quaternion) -> Quaternion:
        return multiply(self, other)

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __invert__(self) -> Quaternion:
        return conjugate(self)

    def __abs__(self) -> float:
        return norm(self)


def identity() -> Quaternion:
    return Quaternion(1.0, 0.0, 0.0, 0.0)


def pure(x: float, y: float, z: float) -> Quaternion:
    """Quaternion with zero scalar part representing the vector (x, y, z)."""
    return Quaternion(0.0, x, y, z)


def add(a: Quaternion, b: Quaternion) -> Quaternion:
    require(a, "a")
    require(b, "b")
    return Quaternion(a.w + b.w, a.x + b.x, a.y + b.y, a.z + b.z)


def multiply(a: Quaternion, b: Quaternion) -> Quaternion:
    """Hamilton product ``a * b``."""
    require(a, "a")
    require(b, "b")
    return Quaternion(
        a.w * b.w - a.x * b.x - a.y * b.y - a.z * b.z,
        a.w * b.x + a.x * b.w + a.y * b.z - a.z * b.y,
        a.w * b.y - a.x * b.z + a.y * b.w + a.z * b.x,
        a.w * b.z + a.x * b.y - a.y * b.x + a.z * b.w,
    )


def conjugate(a: Quaternion) -> Quaternion:
    require(a, "a")
    return Quaternion(a.w, -a.x, -a.y, -a.z)


def norm(a: Quaternion) -> float:
    """Euclidean norm. NaN components give NaN."""
    require(a, "a")
    return math.sqrt(a.w * a.w + a.x * a.x + a.y * a.y + a.z * a.z)


def normalize(a: Quaternion) -> Quaternion:
    """Scale ``a`` to unit norm.

    Raises DivideByZeroError when the norm is below NORM_EPSILON.
    """
    n = norm(a)
    if n < NORM_EPSILON:
        raise DivideByZeroError(f"Cannot normalize quaternion with norm {n!r}")
    return Quaternion(a.w / n, a.x / n, a.y / n, a.z / n)


def is_valid(a: Quaternion) -> bool:
    """True iff every component is finite (no NaN, no +/-inf)."""
    require(a, "a")
    return all(math.isfinite(c) for c in a)


def is_unit(a: Quaternion, tol: float = UNIT_TOLERANCE) -> bool:
    return is_valid(a) and abs(norm(a) - 1.0) <= tol


def rotate_vector(q: Quaternion, v: Quaternion) -> Quaternion:
    """Sandwich product ``q * v * conj(q)``.

    For unit ``q`` this rotates the vector part of ``v`` and leaves its
    scalar part unchanged.
    """
    return multiply(multiply(q, v), conjugate(q))


def to_euler(q: Quaternion) -> tuple[float, float, float]:
    """Roll, pitch and yaw (3-2-1 convention) of a unit quaternion, in radians.

    Rotating by ``q`` equals rotating about x by roll, then about y by pitch,
    then about z by yaw. Near pitch = +/-pi/2 roll and yaw are coupled; the
    split between them is then arbitrary but still deterministic.
    """
    require(q, "q")
    w, x, y, z = q

    roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))

    # Clamp so rounding cannot push asin out of its domain
    sinp = max(-1.0, min(1.0, 2.0 * (w * y - z * x)))
    pitch = math.asin(sinp)

    yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return roll, pitch, yaw
