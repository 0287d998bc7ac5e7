"""Resolve upcoming ISS pass windows for a pair of coordinates."""
from __future__ import annotations

from typing import List, Optional

from pydantic import ValidationError

from isspass.errors import ParseError
from isspass.fetch.endpoints import DEFAULT_ENDPOINTS, Endpoints
from isspass.fetch.fetcher import fetch_json
from isspass.fetch.session import ApiSession
from isspass.models import Coordinates, PassTimesPayload, PassWindow
from isspass.observability.metrics import MetricsRegistry

STAGE = "passes"


async def resolve_pass_times(
    session: ApiSession,
    coords: Coordinates,
    *,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    metrics: Optional[MetricsRegistry] = None,
) -> List[PassWindow]:
    """Return pass windows in upstream order; an empty list is a valid answer."""
    params = {"lat": coords.latitude, "lon": coords.longitude}
    payload = await fetch_json(
        session,
        endpoints.pass_times,
        stage=STAGE,
        what=f"times for lat={coords.latitude} lon={coords.longitude}",
        params=params,
        metrics=metrics,
    )
    try:
        return list(PassTimesPayload.model_validate(payload).response)
    except ValidationError as exc:
        if metrics is not None:
            metrics.incr("parse_errors")
        raise ParseError(f"Unexpected pass-time payload: {exc}", stage=STAGE, url=endpoints.pass_times) from exc
