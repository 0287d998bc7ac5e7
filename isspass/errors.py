"""Error taxonomy shared by every stage of the pass-time lookup."""
from __future__ import annotations

from typing import Optional


class PassLookupError(Exception):
    """Base class for failures raised while resolving pass times."""

    def __init__(self, message: str, *, stage: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.url = url


class NetworkError(PassLookupError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""

    def __init__(self, message: str, *, stage: str, url: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        super().__init__(message, stage=stage, url=url)
        self.cause = cause


class UpstreamStatusError(PassLookupError):
    """The upstream API answered with a non-success status."""

    def __init__(self, message: str, *, stage: str, status_code: int, body: str, url: Optional[str] = None) -> None:
        super().__init__(message, stage=stage, url=url)
        self.status_code = status_code
        self.body = body


class ParseError(PassLookupError):
    """The response body was not JSON or did not match the expected shape."""
