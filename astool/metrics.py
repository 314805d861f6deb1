from __future__ import annotations

import logging
import math
import statistics
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence


def _nearest_rank(ordered: Sequence[float], q: float) -> float:
    rank = max(1, math.ceil(q * len(ordered)))
    return ordered[rank - 1]


@dataclass
class OpStats:
    """Latency summary of one store operation, in milliseconds."""

    count: int
    p50: float
    p95: float
    p99: float
    min: float
    max: float
    avg: float

    @classmethod
    def from_samples(cls, samples: Sequence[float]) -> "OpStats":
        ordered = sorted(samples)
        return cls(
            count=len(ordered),
            p50=_nearest_rank(ordered, 0.50),
            p95=_nearest_rank(ordered, 0.95),
            p99=_nearest_rank(ordered, 0.99),
            min=ordered[0],
            max=ordered[-1],
            avg=statistics.fmean(ordered),
        )

    def line(self, op: str) -> str:
        return (
            f"{op:<10} count={self.count:<5} "
            f"p50={self.p50:.3f}ms p95={self.p95:.3f}ms p99={self.p99:.3f}ms "
            f"min={self.min:.3f}ms max={self.max:.3f}ms avg={self.avg:.3f}ms"
        )


class MetricsRecorder:
    """Per-invocation latency samples, keyed by "<prefix>.<op>"."""

    def __init__(self):
        self.samples: Dict[str, List[float]] = defaultdict(list)

    def record(self, op: str, ms: float):
        self.samples[op].append(ms)

    def summary(self) -> Dict[str, OpStats]:
        return {op: OpStats.from_samples(vals) for op, vals in self.samples.items() if vals}

    def log_summary(self, logger: logging.Logger):
        for op, stats in self.summary().items():
            logger.info(stats.line(op))


class InstrumentedStore:
    """
    Wraps a RecordStore and times get/delete/scan into a MetricsRecorder.
    Failed calls are timed too.
    """

    def __init__(self, inner, recorder: MetricsRecorder, prefix="as"):
        self.inner = inner
        self.recorder = recorder
        self.prefix = prefix

    def __getattr__(self, name: str):
        return getattr(self.inner, name)

    def _timed(self, op: str, fn: Callable, *args):
        start = time.perf_counter_ns()
        try:
            return fn(*args)
        finally:
            self.recorder.record(f"{self.prefix}.{op}", (time.perf_counter_ns() - start) / 1e6)

    def get(self, pk):
        return self._timed("get", self.inner.get, pk)

    def delete(self, pk):
        return self._timed("delete", self.inner.delete, pk)

    def scan(self, callback):
        return self._timed("scan", self.inner.scan, callback)
