"""Error types shared by the algebra and the container codec.

Every error carries a stable ``code`` so reports and the CLI can surface a
single-line reason without a stack trace.
"""
from __future__ import annotations


class HypercomplexError(ValueError):
    code = "E_HYPERCOMPLEX"


class NullArgumentError(HypercomplexError):
    """A required input was ``None``."""

    code = "E_NULL_ARGUMENT"


class DivideByZeroError(HypercomplexError):
    """Normalization of a quaternion whose norm is (numerically) zero."""

    code = "E_DIVIDE_BY_ZERO"


class InvalidKeyError(HypercomplexError):
    """Key has a NaN or infinite component."""

    code = "E_INVALID_KEY"


class MalformedContainerError(HypercomplexError):
    code = "E_MALFORMED"


class BufferTooSmallError(HypercomplexError):
    """Caller-supplied output buffer cannot hold the result.

    ``required`` is the exact size the caller must provide.
    """

    code = "E_BUFFER_TOO_SMALL"

    def __init__(self, required: int, available: int):
        super().__init__(f"Output buffer too small: need {required} bytes, have {available}")
        self.required = required
        self.available = available


class IntegrityMismatchError(HypercomplexError):
    """Recomputed checksum disagrees with the header.

    The recovered bytes are kept on the error so a caller can still inspect
    them; they are unverified.
    """

    code = "E_INTEGRITY_MISMATCH"

    def __init__(self, plaintext: bytes, expected: int, computed: int, message: str | None = None):
        super().__init__(
            message or f"Checksum mismatch: header 0x{expected:08x}, computed 0x{computed:08x}"
        )
        self.plaintext = plaintext
        self.expected = expected
        self.computed = computed

    @property
    def length(self) -> int:
        return len(self.plaintext)


class KeyMismatchError(IntegrityMismatchError):
    """The caller's key is not the key recorded in the container header.

    A damaged key field can still decode to a plaintext that passes the
    checksum, so a disagreeing key is treated as an integrity failure.
    """

    def __init__(self, plaintext: bytes, expected: int, computed: int, supplied, stored):
        super().__init__(
            plaintext,
            expected,
            computed,
            f"Key mismatch: supplied {supplied.as_tuple()}, container {stored.as_tuple()}",
        )
        self.supplied = supplied
        self.stored = stored


def require(value, name: str):
    """Raise NullArgumentError if ``value`` is None, else return it."""
    if value is None:
        raise NullArgumentError(f"{name} must not be None")
    return value


def require_bytes(value, name: str) -> bytes:
    """Copy a bytes-like ``value``; integers and strings raise TypeError."""
    return bytes(memoryview(require(value, name)))
