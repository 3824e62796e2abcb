import logging
import random
import struct

import pytest

from hcx_core.errors import (
    BufferTooSmallError,
    DivideByZeroError,
    IntegrityMismatchError,
    InvalidKeyError,
    KeyMismatchError,
    MalformedContainerError,
    NullArgumentError,
)
from hcx_core.keys import generate_key
from hcx_core.protocol import CHECKSUM_OFFSET, HEADER_FMT, HEADER_LEN, KEY_OFFSET, LENGTH_OFFSET, MAGIC
from hcx_core.quaternion import Quaternion
from hcx_pack.checksum import checksum
from hcx_pack.container import (
    decode,
    decode_into,
    encode,
    encode_into,
    padded_length,
    read_header,
    required_size,
)

MESSAGE = b"Hello, hypercomplex world! This is test data."
SHORT = b"Hello, world!"


def _random_bytes(n, seed):
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(n))


def test_header_layout_constants():
    assert struct.calcsize(HEADER_FMT) == HEADER_LEN
    assert LENGTH_OFFSET == 4
    assert KEY_OFFSET == 12
    assert CHECKSUM_OFFSET == 28


@pytest.mark.parametrize("n, expected", [(0, 0), (1, 16), (15, 16), (16, 16), (17, 32), (45, 48)])
def test_padded_length(n, expected):
    assert padded_length(n) == expected
    assert required_size(n) == HEADER_LEN + expected


def test_round_trip_message():
    key = generate_key(12345)
    blob = encode(MESSAGE, key)
    assert len(blob) == HEADER_LEN + 48
    assert decode(blob, key) == MESSAGE


@pytest.mark.parametrize("seed", [0, 3, 99, 2**40 + 1])
def test_round_trip_arbitrary_lengths(seed):
    key = generate_key(seed)
    for n in range(0, 70):
        data = _random_bytes(n, seed + n)
        assert decode(encode(data, key), key) == data


def test_header_fields():
    key = generate_key(7)
    blob = encode(MESSAGE, key)
    header = read_header(blob)
    assert header.magic == MAGIC
    assert blob[:4] == MAGIC.to_bytes(4, "little")
    assert header.length == len(MESSAGE)
    assert header.key == key
    assert header.checksum == checksum(MESSAGE)
    assert struct.unpack_from("<4f", blob, KEY_OFFSET) == key.as_tuple()


def test_payload_is_transformed():
    blob = encode(bytes(range(64)), generate_key(1))
    assert blob[HEADER_LEN:] != bytes(range(64))


def test_encoding_is_deterministic():
    key = generate_key(5)
    assert encode(MESSAGE, key) == encode(bytearray(MESSAGE), key) == encode(memoryview(MESSAGE), key)


def test_invalid_key_rejected():
    with pytest.raises(InvalidKeyError):
        encode(MESSAGE, Quaternion(float("nan"), 0, 0, 0))
    with pytest.raises(InvalidKeyError):
        encode(MESSAGE, Quaternion(0, float("inf"), 0, 0))


def test_zero_key_rejected():
    with pytest.raises(DivideByZeroError):
        encode(MESSAGE, Quaternion(0, 0, 0, 0))


def test_none_arguments_rejected():
    key = generate_key(1)
    with pytest.raises(NullArgumentError):
        encode(None, key)
    with pytest.raises(NullArgumentError):
        encode(MESSAGE, None)
    with pytest.raises(NullArgumentError):
        decode(None, key)
    with pytest.raises(NullArgumentError):
        decode(encode(MESSAGE, key), None)


@pytest.mark.parametrize("bad", [5, 0, "Hello", [72, 105]])
def test_non_buffer_inputs_rejected(bad):
    key = generate_key(1)
    with pytest.raises(TypeError):
        encode(bad, key)
    with pytest.raises(TypeError):
        encode_into(bad, key, bytearray(64))
    with pytest.raises(TypeError):
        read_header(bad)
    with pytest.raises(TypeError):
        decode(bad, key)
    with pytest.raises(TypeError):
        decode_into(bad, key, bytearray(64))


def test_encode_into_reports_required_size_without_writing():
    key = generate_key(12345)
    need = required_size(len(MESSAGE))
    out = bytearray(b"\xaa" * (need - 1))

    with pytest.raises(BufferTooSmallError) as exc:
        encode_into(MESSAGE, key, out)

    assert exc.value.required == need
    assert exc.value.available == need - 1
    assert out == bytearray(b"\xaa" * (need - 1))


def test_encode_into_exact_and_larger_buffers():
    key = generate_key(12345)
    need = required_size(len(MESSAGE))

    exact = bytearray(need)
    assert encode_into(MESSAGE, key, exact) == need
    assert bytes(exact) == encode(MESSAGE, key)

    larger = bytearray(b"\xaa" * (need + 10))
    assert encode_into(MESSAGE, key, larger) == need
    assert bytes(larger[:need]) == bytes(exact)
    assert larger[need:] == bytearray(b"\xaa" * 10)


def test_encode_into_read_only_buffer():
    with pytest.raises(TypeError):
        encode_into(MESSAGE, generate_key(1), bytes(128))


def test_decode_too_short():
    with pytest.raises(MalformedContainerError):
        decode(b"\xef\xbe\xad\xde", generate_key(1))
    with pytest.raises(MalformedContainerError):
        decode(b"", generate_key(1))


def test_decode_bad_magic():
    key = generate_key(1)
    blob = bytearray(encode(MESSAGE, key))
    blob[0] ^= 0x01
    with pytest.raises(MalformedContainerError):
        decode(bytes(blob), key)


def test_decode_inconsistent_payload_length():
    key = generate_key(1)
    blob = encode(MESSAGE, key)
    with pytest.raises(MalformedContainerError):
        decode(blob + b"\x00", key)
    with pytest.raises(MalformedContainerError):
        decode(blob[:-16], key)


def test_decode_non_finite_header_key():
    key = generate_key(1)
    blob = bytearray(encode(MESSAGE, key))
    struct.pack_into("<f", blob, KEY_OFFSET, float("nan"))
    with pytest.raises(MalformedContainerError):
        decode(bytes(blob), key)


@pytest.mark.parametrize("offset", [CHECKSUM_OFFSET, CHECKSUM_OFFSET + 1, CHECKSUM_OFFSET + 3])
def test_flipped_checksum_byte_detected(offset):
    key = generate_key(12345)
    blob = bytearray(encode(MESSAGE, key))
    blob[offset] ^= 0x10

    with pytest.raises(IntegrityMismatchError) as exc:
        decode(bytes(blob), key)

    # Payload is intact, so the unverified plaintext is still correct.
    assert exc.value.plaintext == MESSAGE
    assert exc.value.length == len(MESSAGE)
    assert exc.value.computed == checksum(MESSAGE)


@pytest.mark.parametrize("scalar_offset", [0, 5, 10])
def test_flipped_payload_byte_detected(scalar_offset):
    # Scalar lanes pass through the rotation unchanged, so one flipped
    # payload byte there flips exactly one plaintext byte.
    key = generate_key(12345)
    blob = bytearray(encode(SHORT, key))
    blob[HEADER_LEN + scalar_offset] ^= 0x01

    with pytest.raises(IntegrityMismatchError) as exc:
        decode(bytes(blob), key)

    expected = bytearray(SHORT)
    expected[scalar_offset] ^= 0x01
    assert exc.value.plaintext == bytes(expected)


def test_decode_rejects_other_key():
    key = generate_key(12345)
    blob = encode(MESSAGE, key)
    other = generate_key(1)

    with pytest.raises(KeyMismatchError) as exc:
        decode(blob, other)

    # Decoding still ran with the header key.
    assert exc.value.plaintext == MESSAGE
    assert exc.value.supplied == other
    assert exc.value.stored == key
    assert exc.value.code == "E_INTEGRITY_MISMATCH"


@pytest.mark.parametrize("offset", range(KEY_OFFSET, CHECKSUM_OFFSET))
def test_flipped_key_byte_detected(offset):
    key = generate_key(12345)
    blob = bytearray(encode(MESSAGE, key))
    blob[offset] ^= 0x01

    with pytest.raises(IntegrityMismatchError):
        decode(bytes(blob), key)


def test_decode_into_rejects_other_key():
    key = generate_key(12345)
    blob = encode(MESSAGE, key)
    out = bytearray(len(MESSAGE))

    with pytest.raises(KeyMismatchError):
        decode_into(blob, generate_key(1), out)

    assert bytes(out) == MESSAGE


def test_decode_into():
    key = generate_key(12345)
    blob = encode(MESSAGE, key)
    out = bytearray(len(MESSAGE) + 5)
    assert decode_into(blob, key, out) == len(MESSAGE)
    assert bytes(out[: len(MESSAGE)]) == MESSAGE


def test_decode_into_too_small():
    key = generate_key(12345)
    blob = encode(MESSAGE, key)
    out = bytearray(len(MESSAGE) - 1)
    with pytest.raises(BufferTooSmallError) as exc:
        decode_into(blob, key, out)
    assert exc.value.required == len(MESSAGE)
    assert out == bytearray(len(MESSAGE) - 1)


def test_decode_into_keeps_unverified_bytes():
    key = generate_key(12345)
    blob = bytearray(encode(MESSAGE, key))
    blob[CHECKSUM_OFFSET] ^= 0xFF
    out = bytearray(len(MESSAGE))

    with pytest.raises(IntegrityMismatchError) as exc:
        decode_into(bytes(blob), key, out)

    assert exc.value.length == len(MESSAGE)
    assert bytes(out) == MESSAGE


def test_empty_plaintext():
    key = generate_key(8)
    blob = encode(b"", key)
    assert len(blob) == HEADER_LEN
    assert decode(blob, key) == b""


def test_debug_records_use_deferred_arguments(caplog):
    key = generate_key(12345)
    with caplog.at_level(logging.DEBUG, logger="hcx_pack.container"):
        decode(encode(MESSAGE, key), key)

    encoded, decoded = [r for r in caplog.records if r.name == "hcx_pack.container"]
    assert encoded.args == (len(MESSAGE), required_size(len(MESSAGE)), checksum(MESSAGE))
    assert decoded.getMessage().startswith(f"Decoded {len(MESSAGE)} bytes")
