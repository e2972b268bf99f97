"""Read cache signals out of storefront responses.

Two things are looked at:

* whether a page cache served the response (a cache-status header), and
* the object-cache instrumentation that Object Cache Pro prints into the HTML
  footer, e.g. ``<!-- plugin=object-cache-pro metric#hits=120
  metric#store-reads=4 metric#store-writes=1 metric#ms-cache=1.93
  metric#ms-cache-ratio=4.1 -->``.

Neither is guaranteed to be present. Absence or garbage is never an error.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable

from .transport import Response

logger = logging.getLogger(__name__)

_METRIC_TOKEN = re.compile(r"metric#([a-z][a-z0-9-]*)=(\S+?)(?=\s|-->|$)")

# instrumentation token -> CacheMetricSample field
_SAMPLE_FIELDS = {
    "hits": "hits",
    "store-reads": "store_reads",
    "store-writes": "store_writes",
    "ms-cache": "ms_cache",
    "ms-cache-ratio": "ms_cache_ratio",
}


@dataclass(frozen=True)
class CacheMetricSample:
    was_cached: bool
    hits: float | None = None
    store_reads: float | None = None
    store_writes: float | None = None
    ms_cache: float | None = None
    ms_cache_ratio: float | None = None


def _to_number(raw: str) -> float | None:
    try:
        value = float(raw.rstrip("%"))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


class ResponseInspector:
    def __init__(self, cache_status_headers: Iterable[str], cache_hit_values: Iterable[str] = ("hit",)):
        self.cache_status_headers = tuple(h.lower() for h in cache_status_headers)
        self.cache_hit_values = tuple(v.lower() for v in cache_hit_values)

    @classmethod
    def from_settings(cls, settings) -> "ResponseInspector":
        return cls(settings.cache_status_headers, settings.cache_hit_values)

    def was_cached(self, response: Response) -> bool:
        headers = response.headers or {}
        for name in self.cache_status_headers:
            value = headers.get(name)
            if not isinstance(value, str):
                continue
            value = value.strip().lower()
            # e.g. "HIT", "HIT from edge-3", "hit, hit"
            if any(value.startswith(hit) for hit in self.cache_hit_values):
                return True
        return False

    def metric_sample(self, response: Response, was_cached: bool) -> CacheMetricSample | None:
        body = response.body
        if not isinstance(body, str) or "metric#" not in body:
            return None

        values = {}
        for token, raw in _METRIC_TOKEN.findall(body):
            field_name = _SAMPLE_FIELDS.get(token)
            if field_name is None or field_name in values:
                continue
            number = _to_number(raw)
            if number is not None:
                values[field_name] = number

        if not values:
            logger.debug(f"Ignoring unparseable cache instrumentation in {response.url}")
            return None
        return CacheMetricSample(was_cached=was_cached, **values)

    def inspect(self, response: Response) -> tuple[bool, CacheMetricSample | None]:
        cached = self.was_cached(response)
        return cached, self.metric_sample(response, cached)
