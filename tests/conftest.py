"""Shared pytest fixtures and configuration."""

import json
from typing import Any

import httpx
import pytest

from tracker_mcp.adapters.outbound.tracker_adapter import TrackerAdapter


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")


class FakeTrackerApi:
    """Records outgoing requests and answers each one with the configured response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = 200
        self._response_kwargs: dict[str, Any] = {"json": {}}

    def respond(self, status_code: int = 200, **kwargs: Any) -> None:
        self._status_code = status_code
        self._response_kwargs = kwargs

    def adapter(self, **config: Any) -> TrackerAdapter:
        if not config:
            config = {"token": "oauth-token", "org_id": "org-1"}
        return TrackerAdapter(transport=httpx.MockTransport(self._handle), **config)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> Any:
        return json.loads(self.last_request.content)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self._status_code, **self._response_kwargs)


@pytest.fixture
def tracker_api() -> FakeTrackerApi:
    """Fake Tracker HTTP API backed by httpx.MockTransport."""
    return FakeTrackerApi()
