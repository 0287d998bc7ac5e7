"""Tracing helpers for lookup stages."""
from __future__ import annotations

import contextlib
import time
from typing import Iterator, Optional

from structlog.contextvars import bound_contextvars

from isspass.observability.log import get_logger

LOGGER = get_logger("isspass.trace")


@contextlib.contextmanager
def run_context(*, run_id: str) -> Iterator[None]:
    """Bind `run_id` for the block, restoring the caller's context afterwards."""
    with bound_contextvars(run_id=run_id):
        LOGGER.debug("run_context_bound", run_id=run_id)
        yield


@contextlib.contextmanager
def span(*, name: str, url: Optional[str] = None) -> Iterator[None]:
    start = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "ok"
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        LOGGER.info("stage_request", stage=name, url=url, outcome=outcome, elapsed_ms=elapsed_ms)


def log_fetch_result(*, url: str, status: int, bytes_read: int, elapsed_ms: int) -> None:
    LOGGER.info(
        "stage_response",
        url=url,
        status=status,
        bytes=bytes_read,
        elapsed_ms=elapsed_ms,
    )
