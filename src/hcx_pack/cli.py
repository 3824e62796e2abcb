"""Hypercomplex Pack - Container encoder/decoder CLI."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from hcx_core.errors import IntegrityMismatchError
from hcx_core.keys import generate_key, parse_key
from hcx_core.protocol import DEFAULT_BENCH_ITERATIONS
from hcx_core.quaternion import Quaternion, is_unit

from .bench import benchmark, write_stats
from .container import decode, encode, read_header

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


def _key_json(key: Quaternion) -> str:
    return json.dumps(
        {"w": key.w, "x": key.x, "y": key.y, "z": key.z, "unit": is_unit(key)},
        **CANONICAL_JSON_KW,
    )


def encode_file(src: Path, dst: Path, key: Quaternion) -> None:
    """Encode the file ``src`` into the container ``dst``."""
    print(f"Encoding: {src}")
    raw = src.read_bytes()
    blob = encode(raw, key)
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_bytes(blob)

    print(f"PASS: Container written to {dst}")
    print(f"  Plaintext: {len(raw)} bytes")
    print(f"  Container: {len(blob)} bytes")


def decode_file(src: Path, dst: Path, force: bool = False, key: Quaternion | None = None) -> None:
    """Decode the container ``src`` into ``dst``.

    Without ``key`` the header key is trusted. Unverified output is written
    only with ``force``.
    """
    blob = src.read_bytes()
    if key is None:
        key = read_header(blob).key
    try:
        plaintext = decode(blob, key)
    except IntegrityMismatchError as e:
        if not force:
            raise
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_bytes(e.plaintext)
        print(f"WARN: {e}. Wrote {e.length} unverified bytes to {dst}")
        return

    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_bytes(plaintext)
    print(f"PASS: Plaintext written to {dst} ({len(plaintext)} bytes)")


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Quaternion-keyed container tool."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command("keygen")
@click.argument("seed", type=int)
def keygen_cmd(seed: int) -> None:
    """Print the unit key derived from SEED."""
    try:
        key = generate_key(seed)
    except ValueError as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)
    click.echo(_key_json(key))


@main.command("encode")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("dst", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--seed", type=int, default=None, help="Derive the key from this seed")
@click.option("--key", "key_text", type=str, default=None, help="Explicit key as w,x,y,z")
def encode_cmd(src: Path, dst: Path, seed: int | None, key_text: str | None) -> None:
    """Encode SRC into the container DST."""
    if (seed is None) == (key_text is None):
        raise click.UsageError("Give exactly one of --seed or --key")
    try:
        key = generate_key(seed) if seed is not None else parse_key(key_text)
        encode_file(src, dst, key)
    except Exception as e:
        # Fail closed, with a single-line reason.
        print(f"FATAL: {e}")
        raise SystemExit(1)


@main.command("decode")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("dst", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Write recovered bytes even if the checksum fails")
@click.option("--seed", type=int, default=None, help="Expect the key derived from this seed")
@click.option("--key", "key_text", type=str, default=None, help="Expect this key, as w,x,y,z")
def decode_cmd(src: Path, dst: Path, force: bool, seed: int | None, key_text: str | None) -> None:
    """Decode the container SRC into DST."""
    if seed is not None and key_text is not None:
        raise click.UsageError("Give at most one of --seed or --key")
    try:
        key = None
        if seed is not None:
            key = generate_key(seed)
        elif key_text is not None:
            key = parse_key(key_text)
        decode_file(src, dst, force=force, key=key)
    except Exception as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)


@main.command("bench")
@click.option("--iterations", type=int, default=DEFAULT_BENCH_ITERATIONS, show_default=True)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also write the run to this Parquet file")
def bench_cmd(iterations: int, out: Path | None) -> None:
    """Benchmark the quaternion product."""
    try:
        stats = benchmark(iterations)
    except ValueError as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)

    click.echo(f"Operations/sec: {stats.operations_per_second}")
    click.echo(f"Average latency: {stats.average_latency_ns:.2f} ns")
    click.echo(f"Bytes processed: {stats.bytes_processed}")
    if out is not None:
        write_stats(stats, out, iterations)
        click.echo(f"Stats written to {out}")


if __name__ == "__main__":
    main()
