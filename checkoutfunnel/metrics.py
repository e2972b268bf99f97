"""Thread-safe accumulation of named numeric observations."""

import json
import logging
import threading
import time
from dataclasses import dataclass, field

import numpy as np

from .inspector import CacheMetricSample

logger = logging.getLogger(__name__)

ERRORS = "errors"
RESPONSE_CACHED = "response_cached"
CACHE_HITS = "cache_hits"
STORE_READS = "store_reads"
STORE_WRITES = "store_writes"
MS_CACHE = "ms_cache"
MS_CACHE_RATIO = "ms_cache_ratio"

# Series holding 0/1 values; summarised as a rate
RATE_METRICS = (ERRORS, RESPONSE_CACHED)

_SAMPLE_METRICS = {
    "hits": CACHE_HITS,
    "store_reads": STORE_READS,
    "store_writes": STORE_WRITES,
    "ms_cache": MS_CACHE,
    "ms_cache_ratio": MS_CACHE_RATIO,
}


@dataclass(frozen=True)
class MetricObservation:
    name: str
    value: float
    timestamp: float


@dataclass
class _Series:
    lock: threading.Lock = field(default_factory=threading.Lock)
    observations: list[MetricObservation] = field(default_factory=list)


class MetricsSink:
    """Shared by every virtual user of a run.

    Each metric name has its own lock, so writers of different metrics never
    wait on each other; the registry lock is only taken the first time a name
    is seen.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._series: dict[str, _Series] = {}
        self._registry_lock = threading.Lock()

    def _series_for(self, name: str) -> _Series:
        series = self._series.get(name)
        if series is None:
            with self._registry_lock:
                series = self._series.setdefault(name, _Series())
        return series

    def record(self, name: str, value: float) -> None:
        observation = MetricObservation(name, float(value), self._clock())
        series = self._series_for(name)
        with series.lock:
            series.observations.append(observation)

    def record_response(self, was_cached: bool, sample: CacheMetricSample | None) -> None:
        """Record everything one response told us about the cache."""
        self.record(RESPONSE_CACHED, 1 if was_cached else 0)
        if sample is None:
            return
        for attr, name in _SAMPLE_METRICS.items():
            value = getattr(sample, attr)
            if value is not None:
                self.record(name, value)

    def names(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._series)

    def observations(self, name: str) -> list[MetricObservation]:
        series = self._series.get(name)
        if series is None:
            return []
        with series.lock:
            return list(series.observations)

    def count(self, name: str) -> int:
        return len(self.observations(name))

    def summary(self) -> dict[str, dict]:
        """Per-metric aggregates, shaped like k6's end-of-test summary."""
        result = {}
        for name in self.names():
            values = np.array([o.value for o in self.observations(name)], dtype=float)
            if values.size == 0:
                continue
            stats = {
                "count": int(values.size),
                "avg": float(values.mean()),
                "min": float(values.min()),
                "med": float(np.median(values)),
                "p90": float(np.percentile(values, 90)),
                "p95": float(np.percentile(values, 95)),
                "max": float(values.max()),
            }
            if name in RATE_METRICS:
                stats["rate"] = float(np.count_nonzero(values) / values.size)
            result[name] = stats
        return result

    def write_report(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(self.summary(), f, indent=2)
        logger.info(f"Wrote metrics report to {path}")
