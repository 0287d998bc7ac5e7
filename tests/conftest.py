from collections import Counter

import httpx
import pytest

IP_HOST = "api.ipify.org"
GEO_HOST = "ipvigilante.com"
PASS_HOST = "api.open-notify.org"


class StubApi:
    """Routes requests by host to canned responses and counts the calls."""

    def __init__(self, routes):
        self._routes = dict(routes)
        self.calls = Counter()
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.calls[host] += 1
        self.requests.append(request)
        route = self._routes[host]
        if isinstance(route, type) and issubclass(route, httpx.TransportError):
            raise route("stubbed transport failure", request=request)
        status, body = route
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def happy_routes():
    return {
        IP_HOST: (200, {"ip": "1.2.3.4"}),
        GEO_HOST: (200, {"status": "success", "data": {"latitude": 45.0, "longitude": -73.0}}),
        PASS_HOST: (200, {"message": "success", "response": [{"risetime": 1000, "duration": 600}]}),
    }
