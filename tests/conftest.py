"""
Pytest configuration and fixtures for the test suite.

This module contains shared fixtures used across all tests.
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

import httpx
import pytest

from core.config import get_settings
from services.topsort.client import TopsortClient

BASE_URL = "https://api.test.topsort.com"

Handler: TypeAlias = Callable[[httpx.Request], httpx.Response]


@dataclass
class RecordingTransport:
    """
    Mock transport that records requests and answers with a fixed handler.

    Attributes:
        handler: Function producing the response for each request.
        requests: Requests received, in order.
    """

    handler: Handler
    requests: list[httpx.Request] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last_request(self) -> httpx.Request:
        """Return the most recent request."""
        return self.requests[-1]

    def last_json(self) -> Any:
        """Return the JSON body of the most recent request."""
        return json.loads(self.last_request.content)


@pytest.fixture(autouse=True)
def clean_topsort_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep environment variables from leaking into settings."""
    for key in list(os.environ.keys()):
        if key.startswith(("TOPSORT_", "LOG_")) or key == "ENVIRONMENT":
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def make_client() -> Callable[[Handler], tuple[TopsortClient, RecordingTransport]]:
    """Return a factory building a client around a recording transport."""

    def factory(handler: Handler) -> tuple[TopsortClient, RecordingTransport]:
        recorder = RecordingTransport(handler)
        client = TopsortClient(
            marketplace="test-marketplace",
            api_key="test-api-key",
            base_url=BASE_URL,
            transport=recorder.transport,
        )
        return client, recorder

    return factory
