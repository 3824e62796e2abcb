"""Hypercomplex Core - Quaternion algebra and key derivation."""
from .errors import (
    BufferTooSmallError,
    DivideByZeroError,
    HypercomplexError,
    IntegrityMismatchError,
    InvalidKeyError,
    KeyMismatchError,
    MalformedContainerError,
    NullArgumentError,
)
from .keys import generate_key, key_from_components, parse_key
from .quaternion import (
    Quaternion,
    add,
    conjugate,
    identity,
    is_unit,
    is_valid,
    multiply,
    norm,
    normalize,
    pure,
    rotate_vector,
    to_euler,
)

__all__ = [
    "Quaternion",
    "identity",
    "pure",
    "add",
    "multiply",
    "conjugate",
    "norm",
    "normalize",
    "is_valid",
    "is_unit",
    "rotate_vector",
    "to_euler",
    "generate_key",
    "key_from_components",
    "parse_key",
    "HypercomplexError",
    "NullArgumentError",
    "DivideByZeroError",
    "InvalidKeyError",
    "MalformedContainerError",
    "BufferTooSmallError",
    "IntegrityMismatchError",
    "KeyMismatchError",
]
