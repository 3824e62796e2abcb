"""Quaternion multiply micro-benchmark."""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from hcx_core.protocol import BENCH_LHS, BENCH_RHS
from hcx_core.quaternion import Quaternion, multiply

# Two operands of four binary32 components each
_BYTES_PER_OP = 2 * 4 * 4


@dataclass(frozen=True)
class PerfStats:
    operations_per_second: int
    average_latency_ns: float
    bytes_processed: int


def benchmark(iterations: int) -> PerfStats:
    """Time ``iterations`` Hamilton products on the monotonic clock."""
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")

    a = Quaternion(*BENCH_LHS)
    b = Quaternion(*BENCH_RHS)

    start = time.perf_counter_ns()
    for _ in range(iterations):
        multiply(a, b)
    elapsed_ns = max(time.perf_counter_ns() - start, 1)

    return PerfStats(
        operations_per_second=iterations * 1_000_000_000 // elapsed_ns,
        average_latency_ns=elapsed_ns / iterations,
        bytes_processed=iterations * _BYTES_PER_OP,
    )


def write_stats(stats: PerfStats, path: Path, iterations: int, timestamp: str | None = None) -> None:
    """Write one benchmark run as a single-row Parquet table."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

    row = {"created": timestamp, "iterations": int(iterations), **asdict(stats)}
    schema = pa.schema(
        [
            ("created", pa.string()),
            ("iterations", pa.int64()),
            ("operations_per_second", pa.int64()),
            ("average_latency_ns", pa.float64()),
            ("bytes_processed", pa.int64()),
        ]
    )

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame([row])
    pq.write_table(pa.Table.from_pandas(df, schema=schema, preserve_index=False), path)
