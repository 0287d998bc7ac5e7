import asyncio

import httpx
import pytest

from conftest import StubApi
from isspass.errors import NetworkError, ParseError, UpstreamStatusError
from isspass.fetch.fetcher import fetch_json
from isspass.fetch.session import create_api_session
from isspass.observability.metrics import MetricsRegistry

URL = "https://api.example.test/thing"


def _fetch(route, metrics):
    api = StubApi({"api.example.test": route})

    async def _run():
        async with create_api_session(user_agent="test-agent", timeout=5.0, transport=api.transport()) as session:
            return await fetch_json(session, URL, stage="thing", what="thing", metrics=metrics)

    return api, _run


def test_fetch_json_decodes_body_and_counts_request():
    metrics = MetricsRegistry()
    api, run = _fetch((200, {"hello": "world"}), metrics)

    assert asyncio.run(run()) == {"hello": "world"}
    assert metrics.get("requests_sent") == 1
    assert metrics.get("http_2xx") == 1
    request = api.requests[0]
    assert request.headers["User-Agent"] == "test-agent"
    assert request.headers["Accept"] == "application/json"


def test_non_200_status_carries_code_and_body():
    metrics = MetricsRegistry()
    _, run = _fetch((503, "upstream is down for maintenance"), metrics)

    with pytest.raises(UpstreamStatusError) as excinfo:
        asyncio.run(run())

    error = excinfo.value
    assert error.status_code == 503
    assert error.body == "upstream is down for maintenance"
    assert "503" in str(error)
    assert "upstream is down for maintenance" in str(error)
    assert error.stage == "thing"
    assert metrics.get("status_errors") == 1
    assert metrics.get("http_5xx") == 1


def test_other_success_codes_are_still_rejected():
    _, run = _fetch((204, ""), MetricsRegistry())

    with pytest.raises(UpstreamStatusError) as excinfo:
        asyncio.run(run())
    assert excinfo.value.status_code == 204


def test_transport_failure_becomes_network_error():
    metrics = MetricsRegistry()
    _, run = _fetch(httpx.ConnectError, metrics)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(run())

    assert isinstance(excinfo.value.cause, httpx.ConnectError)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert metrics.get("network_errors") == 1
    assert metrics.get("http_2xx") == 0


def test_timeout_becomes_network_error():
    _, run = _fetch(httpx.ReadTimeout, MetricsRegistry())

    with pytest.raises(NetworkError):
        asyncio.run(run())


def test_malformed_json_becomes_parse_error():
    metrics = MetricsRegistry()
    _, run = _fetch((200, "<html>not json</html>"), metrics)

    with pytest.raises(ParseError):
        asyncio.run(run())
    assert metrics.get("parse_errors") == 1
