"""Resolve approximate coordinates for an IP address."""
from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from pydantic import ValidationError

from isspass.errors import ParseError
from isspass.fetch.endpoints import DEFAULT_ENDPOINTS, Endpoints
from isspass.fetch.fetcher import fetch_json
from isspass.fetch.session import ApiSession
from isspass.models import Coordinates, GeoPayload
from isspass.observability.metrics import MetricsRegistry

STAGE = "geo"


def geolocation_url(template: str, ip: str) -> str:
    # dots and colons stay literal so IPv4 and IPv6 addresses are unchanged
    return template.format(ip=quote(ip, safe=".:"))


async def resolve_coordinates(
    session: ApiSession,
    ip: str,
    *,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    metrics: Optional[MetricsRegistry] = None,
) -> Coordinates:
    """Look up `data.latitude`/`data.longitude` for `ip`, coerced to floats."""
    url = geolocation_url(endpoints.geolocation, ip)
    payload = await fetch_json(
        session,
        url,
        stage=STAGE,
        what=f"coordinates for {ip}",
        metrics=metrics,
    )
    try:
        return GeoPayload.model_validate(payload).data
    except ValidationError as exc:
        if metrics is not None:
            metrics.incr("parse_errors")
        raise ParseError(f"Unexpected geolocation payload for {ip}: {exc}", stage=STAGE, url=url) from exc
