"""Per-run lookup counters, exported as JSON next to the run's logs."""
from __future__ import annotations

import contextlib
import time
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator

import orjson

from isspass.observability.log import get_logger

LOGGER = get_logger(__name__)

STAGE_COUNTERS = ("requests_sent", "network_errors", "status_errors", "parse_errors")
STATUS_COUNTERS = ("http_2xx", "http_3xx", "http_4xx", "http_5xx")
PIPELINE_COUNTERS = ("pipelines_succeeded", "pipelines_failed", "run_duration_ms")


class MetricsRegistry:
    """Counters for one lookup run; every known counter reports zero until hit."""

    def __init__(self) -> None:
        self._counters: Counter[str] = Counter(
            {name: 0 for name in STAGE_COUNTERS + STATUS_COUNTERS + PIPELINE_COUNTERS}
        )

    def incr(self, name: str, value: int = 1) -> None:
        self._counters[name] += value

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counters)

    def export(self, *, path: Path, run_id: str) -> Path:
        """Write the counters, grouped by concern, under the run id used in the logs."""
        counters = self.snapshot()
        grouped = {
            "stages": {name: counters.get(name, 0) for name in STAGE_COUNTERS},
            "http_status": {name: counters.get(name, 0) for name in STATUS_COUNTERS},
            "pipeline": {name: counters.get(name, 0) for name in PIPELINE_COUNTERS},
        }
        payload = {
            "run_id": run_id,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "counters": counters,
            **grouped,
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        LOGGER.info("metrics_exported", path=str(path), run_id=run_id)
        return path


@contextlib.contextmanager
def record_duration(registry: MetricsRegistry, metric_name: str) -> Iterator[None]:
    """Add the block's wall time, in milliseconds, to `metric_name`."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        registry.incr(metric_name, elapsed_ms)
        LOGGER.info("lookup_timed", metric=metric_name, elapsed_ms=elapsed_ms)
