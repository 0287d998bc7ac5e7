"""Single-request JSON fetching with uniform error mapping."""
from __future__ import annotations

import time
from typing import Any, Mapping, Optional

import httpx
import orjson

from isspass.errors import NetworkError, ParseError, UpstreamStatusError
from isspass.fetch.session import ApiSession, QueryValue
from isspass.observability.log import get_logger
from isspass.observability.metrics import MetricsRegistry
from isspass.observability.tracing import log_fetch_result, span

LOGGER = get_logger(__name__)


def status_message(status_code: int, what: str, body: str) -> str:
    return f"Status Code {status_code} when fetching {what}. Response: {body}"


async def fetch_json(
    session: ApiSession,
    url: str,
    *,
    stage: str,
    what: str,
    params: Optional[Mapping[str, QueryValue]] = None,
    metrics: Optional[MetricsRegistry] = None,
) -> Any:
    """GET `url` and return the decoded JSON body.

    Raises `NetworkError` when no response arrives, `UpstreamStatusError` for
    any status other than 200 and `ParseError` when the body is not JSON.
    Nothing is retried.
    """
    metrics = metrics if metrics is not None else MetricsRegistry()
    metrics.incr("requests_sent")
    try:
        with span(name=stage, url=url):
            start = time.perf_counter()
            response = await session.fetch(url, params=params)
    except httpx.HTTPError as exc:
        metrics.incr("network_errors")
        LOGGER.warning("fetch_network_error", stage=stage, url=url, reason=str(exc))
        raise NetworkError(
            f"Network error when fetching {what}: {exc!r}",
            stage=stage,
            url=url,
            cause=exc,
        ) from exc

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    log_fetch_result(
        url=str(response.request.url),
        status=response.status_code,
        bytes_read=len(response.content or b""),
        elapsed_ms=elapsed_ms,
    )
    metrics.incr(f"http_{response.status_code // 100}xx")

    if response.status_code != httpx.codes.OK:
        metrics.incr("status_errors")
        body = response.text
        raise UpstreamStatusError(
            status_message(response.status_code, what, body),
            stage=stage,
            status_code=response.status_code,
            body=body,
            url=url,
        )

    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError as exc:
        metrics.incr("parse_errors")
        raise ParseError(f"Invalid JSON when fetching {what}: {exc}", stage=stage, url=url) from exc
