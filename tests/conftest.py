"""Pytest configuration and fixtures for tests.

Provides a transport without cache, a mock Redis client and a recorder that
stands in for ``httpx.AsyncClient.request``.
"""

import os

# Keep the developer's environment out of the settings used by tests
os.environ.pop("TIMBER_API_KEY", None)
os.environ.pop("TIMBER_REDIS_URL", None)

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from timber.client import TimberClient
from timber.services.http import TimberHTTPClient


BASE_URL = "http://localhost:4010/api/v1/user/sdk"


class AsyncIter:
    """Async iterator over a fixed list, for mocking ``Redis.scan_iter``."""

    def __init__(self, items: List[Any]):
        self._items = list(items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._items:
            raise StopAsyncIteration
        return self._items.pop(0)


def make_response(
    status_code: int = 200,
    json_data: Any = None,
    text: str = "",
    headers: Optional[Dict[str, str]] = None,
) -> MagicMock:
    """Build a mock httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.json.return_value = json_data if json_data is not None else {}
    response.text = text
    response.content = b"{}"
    response.headers = headers or {}
    return response


class RequestRecorder:
    """Records calls to ``httpx.AsyncClient.request`` and answers them."""

    def __init__(self, json_data: Any = None, status_code: int = 200):
        self.calls: List[Dict[str, Any]] = []
        self.json_data = json_data if json_data is not None else {"_id": "abc123"}
        self.status_code = status_code

    def __call__(self, *args, **kwargs):
        self.calls.append(kwargs)
        return make_response(self.status_code, self.json_data)

    @property
    def last(self) -> Dict[str, Any]:
        return self.calls[-1]


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.scan_iter = MagicMock(return_value=AsyncIter([]))
    return redis


@pytest.fixture
def http_no_cache():
    """Create a TimberHTTPClient without caching and with fast retries."""
    return TimberHTTPClient(
        base_url=BASE_URL,
        api_key="test-api-key",
        cache=None,
        initial_retry_delay=0.01,
    )


@pytest.fixture
def recorder():
    return RequestRecorder()


@pytest.fixture
def timber_client(http_no_cache):
    return TimberClient(http_no_cache)
