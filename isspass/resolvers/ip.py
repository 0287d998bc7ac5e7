"""Resolve the caller's public IP address."""
from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from isspass.errors import ParseError
from isspass.fetch.endpoints import DEFAULT_ENDPOINTS, Endpoints
from isspass.fetch.fetcher import fetch_json
from isspass.fetch.session import ApiSession
from isspass.models import IPEchoPayload
from isspass.observability.metrics import MetricsRegistry

STAGE = "ip"


async def resolve_my_ip(
    session: ApiSession,
    *,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    metrics: Optional[MetricsRegistry] = None,
) -> str:
    """Return the public IP address exactly as reported by the echo service."""
    payload = await fetch_json(session, endpoints.ip_echo, stage=STAGE, what="IP", metrics=metrics)
    try:
        return IPEchoPayload.model_validate(payload).ip
    except ValidationError as exc:
        if metrics is not None:
            metrics.incr("parse_errors")
        raise ParseError(f"Unexpected IP payload: {exc}", stage=STAGE, url=endpoints.ip_echo) from exc
