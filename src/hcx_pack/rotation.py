"""Quaternion-keyed block rotation.

Every 16-byte block is four 4-byte groups. Group ``g`` of a block is read as
a quaternion whose scalar lane is byte ``g`` of the group and whose vector
lanes x, y, z are bytes ``g+1``, ``g+2``, ``g+3`` (mod 4), each holding the
signed value ``byte - 128``. Rotating by the key (the sandwich product
``q * v * conj(q)``) keeps the scalar lane and turns the vector lanes.

The rotation runs on the integer lattice: roll, pitch and yaw planar
rotations, each split into three rounded lifting shears with lane arithmetic
modulo 256. A shear ``dst += round(c * src)`` never changes ``src``, so it is
undone exactly by ``dst -= round(c * src)``. ``key`` and ``conj(key)`` share
one shear schedule (built from whichever of the two has its first non-zero
vector component positive) and run it in opposite directions, so

    rotate_blocks(rotate_blocks(data, q), conjugate(q)) == data

holds bit-for-bit for every valid non-zero key.
"""
from __future__ import annotations

import math

import numpy as np

from hcx_core.errors import InvalidKeyError, require, require_bytes
from hcx_core.protocol import BLOCK_SIZE, GROUP_SIZE
from hcx_core.quaternion import Quaternion, conjugate, is_valid, normalize, to_euler

# Row g: lane indices (scalar, x, y, z) for the g-th group of a block
_LANE_ORDER = np.array(
    [[(g + i) % GROUP_SIZE for i in range(GROUP_SIZE)] for g in range(GROUP_SIZE)]
)

# Vector lanes
_X, _Y, _Z = 0, 1, 2

# Planes (u, v) turned by roll, pitch and yaw, in application order
_PLANES = ((_Y, _Z), (_Z, _X), (_X, _Y))

_GROUPS_PER_BLOCK = BLOCK_SIZE // GROUP_SIZE

_NEGATE = "negate"
_SHEAR = "shear"


def _wrap(values: np.ndarray) -> np.ndarray:
    return (values + 128) % 256 - 128


def _planar_steps(u: int, v: int, angle: float) -> list[tuple]:
    """Lifting steps turning lanes (u, v) by ``angle``."""
    steps: list[tuple] = []
    if abs(angle) > math.pi / 2:
        # Exact half-turn keeps tan(angle / 2) bounded
        steps.append((_NEGATE, u, v))
        angle -= math.copysign(math.pi, angle)

    t = math.tan(angle / 2.0)
    s = math.sin(angle)
    steps.append((_SHEAR, u, v, -t))
    steps.append((_SHEAR, v, u, s))
    steps.append((_SHEAR, u, v, -t))
    return steps


def shear_schedule(key: Quaternion) -> tuple[list[tuple], bool]:
    """Build the lifting schedule for ``key``.

    Returns ``(steps, forward)``. ``key`` and ``conjugate(key)`` get the same
    steps with opposite ``forward`` flags. A key with zero vector part is the
    identity and gets no steps.
    """
    require(key, "key")
    if not is_valid(key):
        raise InvalidKeyError(f"Key components must be finite, got {key.as_tuple()}")

    lead = next((c for c in (key.x, key.y, key.z) if c != 0.0), 0.0)
    forward = lead >= 0.0
    canonical = key if forward else conjugate(key)
    unit = normalize(canonical)
    if lead == 0.0:
        return [], True

    steps: list[tuple] = []
    for (u, v), angle in zip(_PLANES, to_euler(unit)):
        steps.extend(_planar_steps(u, v, angle))
    return steps, forward


def _run(lanes: list[np.ndarray], steps: list[tuple], forward: bool) -> None:
    sign = 1 if forward else -1
    for step in (steps if forward else reversed(steps)):
        if step[0] == _NEGATE:
            _, u, v = step
            lanes[u] = _wrap(-lanes[u])
            lanes[v] = _wrap(-lanes[v])
        else:
            _, dst, src, c = step
            delta = np.rint(c * lanes[src]).astype(np.int64)
            lanes[dst] = _wrap(lanes[dst] + sign * delta)


def rotate_blocks(data: bytes, key: Quaternion) -> bytes:
    """Rotate every group of ``data`` by ``key``.

    ``len(data)`` must be a multiple of BLOCK_SIZE; the result has the same
    length.
    """
    buf = require_bytes(data, "data")
    if len(buf) % BLOCK_SIZE:
        raise ValueError(f"Data length {len(buf)} is not a multiple of {BLOCK_SIZE}")

    steps, forward = shear_schedule(key)
    if not buf or not steps:
        return buf

    groups = np.frombuffer(buf, dtype=np.uint8).reshape(-1, GROUP_SIZE).astype(np.int64) - 128
    rows = np.arange(len(groups))
    order = _LANE_ORDER[rows % _GROUPS_PER_BLOCK]

    lanes = [groups[rows, order[:, lane]] for lane in (1, 2, 3)]
    _run(lanes, steps, forward)
    for lane, values in zip((1, 2, 3), lanes):
        groups[rows, order[:, lane]] = values

    return (groups + 128).astype(np.uint8).tobytes()
