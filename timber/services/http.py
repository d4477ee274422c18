"""HTTP transport shared by all Timber entity services.

This module provides the TimberHTTPClient class. It includes:
- httpx AsyncClient with ``ApiKey`` authentication
- Error mapping from HTTP status codes to SDK exceptions
- Exponential backoff retry logic
- Optional Redis caching of GET responses with write invalidation
"""

import asyncio
import hashlib
import json
import logging
from typing import Any, List, Optional, Tuple

import httpx
from redis.asyncio import Redis

from timber.core.errors import (
    APIError,
    AuthenticationError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimberConnectionError,
    TimberError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class TimberHTTPClient:
    """Async HTTP transport for the Timber API.

    One instance is shared by every entity service of a client. It owns the
    underlying ``httpx.AsyncClient`` unless one is injected.

    Features:
    - ``Authorization: ApiKey <key>`` header on every request
    - JSON and multipart bodies
    - Exponential backoff retry for connection errors, timeouts and 5xx
    - Redis caching with configurable TTL (disabled when no cache is given)

    Example:
        ```python
        http = TimberHTTPClient(
            base_url="http://localhost:4010/api/v1/user/sdk",
            api_key="your-api-key",
        )
        expenses = await http.get("/customer/expense", params={"page": 1})
        await http.close()
        ```
    """

    # Default configuration
    DEFAULT_CACHE_TTL = 300  # 5 minutes
    MAX_RETRIES = 3
    INITIAL_RETRY_DELAY = 1.0  # seconds
    MAX_RETRY_DELAY = 30.0  # seconds
    REQUEST_TIMEOUT = 30.0  # seconds

    def __init__(
        self,
        base_url: str,
        api_key: str,
        cache: Optional[Redis] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        initial_retry_delay: Optional[float] = None,
        max_retry_delay: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize TimberHTTPClient.

        Args:
            base_url: API root including the SDK prefix
            api_key: API key sent as ``Authorization: ApiKey <key>``
            cache: Optional Redis client for caching. If None, caching is disabled.
            cache_ttl: Cache TTL in seconds. Defaults to 300 (5 minutes).
            timeout: Request timeout in seconds
            max_retries: Retries after the first attempt
            initial_retry_delay: First backoff delay in seconds
            max_retry_delay: Upper bound for any backoff delay
            http_client: Optional preconfigured httpx client; it is not closed
                by ``close()``
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.cache = cache
        self.cache_ttl = cache_ttl if cache_ttl is not None else self.DEFAULT_CACHE_TTL
        self.timeout = timeout if timeout is not None else self.REQUEST_TIMEOUT
        if max_retries is not None:
            self.MAX_RETRIES = max_retries
        if initial_retry_delay is not None:
            self.INITIAL_RETRY_DELAY = initial_retry_delay
        if max_retry_delay is not None:
            self.MAX_RETRY_DELAY = max_retry_delay

        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

    @property
    def headers(self) -> dict:
        # Content-Type is left to httpx so multipart bodies get their boundary
        return {
            "Authorization": f"ApiKey {self.api_key}",
            "Accept": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=self.headers,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TimberHTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # =========================================================================
    # Cache Methods
    # =========================================================================

    def _cache_prefix(self, resource: str) -> str:
        base_hash = hashlib.md5(self.base_url.encode()).hexdigest()[:12]
        return f"timber:{base_hash}:{resource.strip('/')}"

    def _get_cache_key(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        resource: Optional[str] = None,
    ) -> str:
        """Generate a cache key for an endpoint and parameters.

        Keys are grouped by resource so writes can invalidate them together.
        """
        key_parts = [endpoint]
        if params:
            # Sort params for consistent key generation
            key_parts.append(json.dumps(params, sort_keys=True, default=str))

        key_hash = hashlib.md5(":".join(key_parts).encode()).hexdigest()
        return f"{self._cache_prefix(resource or endpoint)}:{key_hash}"

    async def _get_from_cache(self, cache_key: str) -> Optional[Any]:
        if self.cache is None:
            return None

        try:
            cached = await self.cache.get(cache_key)
            if cached:
                return json.loads(cached)
        except Exception as e:
            logger.warning(f"Cache get failed for {cache_key}: {e}")

        return None

    async def _set_cache(self, cache_key: str, data: Any, ttl: Optional[int] = None) -> None:
        if self.cache is None:
            return

        try:
            ttl = ttl if ttl is not None else self.cache_ttl
            await self.cache.setex(cache_key, ttl, json.dumps(data))
        except Exception as e:
            logger.warning(f"Cache set failed for {cache_key}: {e}")

    async def invalidate(self, resource: str) -> None:
        """Drop every cached response of a resource."""
        if self.cache is None:
            return

        pattern = f"{self._cache_prefix(resource)}:*"
        try:
            keys = []
            async for key in self.cache.scan_iter(match=pattern):
                keys.append(key)
            if keys:
                await self.cache.delete(*keys)
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {pattern}: {e}")

    # =========================================================================
    # HTTP Request Methods
    # =========================================================================

    def _handle_response_error(self, response: httpx.Response) -> None:
        """Raise the SDK exception matching an error response.

        Raises:
            ValidationError: For 400 and 422 responses
            AuthenticationError: For 401 responses
            ForbiddenError: For 403 responses
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses
            ServerError: For 5xx responses
            APIError: For other error responses
        """
        if response.is_success:
            return

        status = response.status_code

        try:
            error_detail = response.json()
            message = error_detail.get("message", error_detail.get("detail", response.text))
        except Exception:
            error_detail = None
            message = response.text or f"HTTP {status}"

        details = error_detail if isinstance(error_detail, dict) else None

        if status == 401:
            raise AuthenticationError(
                f"Authentication failed: {message}. Check your API key.",
                status_code=status,
                details=details,
            )
        elif status == 403:
            raise ForbiddenError(
                f"Access forbidden: {message}. The API key may lack permissions.",
                status_code=status,
                details=details,
            )
        elif status == 404:
            raise NotFoundError(f"Resource not found: {message}", status_code=status, details=details)
        elif status in (400, 422):
            raise ValidationError(f"Validation error: {message}", status_code=status, details=details)
        elif status == 429:
            retry_after = response.headers.get("Retry-After")
            retry_seconds = int(retry_after) if retry_after and retry_after.isdigit() else None
            raise RateLimitError(f"Rate limited: {message}", retry_after=retry_seconds)
        elif status >= 500:
            raise ServerError(f"Server error ({status}): {message}", status_code=status, details=details)
        else:
            raise APIError(f"API error ({status}): {message}", status_code=status, details=details)

    def _backoff(self, attempt: int) -> float:
        return min(self.INITIAL_RETRY_DELAY * (2 ** attempt), self.MAX_RETRY_DELAY)

    async def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_data: Optional[Any] = None,
        files: Optional[List[Tuple[str, Tuple[Any, ...]]]] = None,
    ) -> httpx.Response:
        """Make an HTTP request with exponential backoff retry.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: API endpoint path
            params: Optional query parameters
            json_data: Optional JSON body data
            files: Optional ordered multipart parts

        Returns:
            HTTP response

        Raises:
            TimberError: If the request fails or all retries fail
        """
        max_retries = self.MAX_RETRIES
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        client = await self._get_client()
        last_exception: Optional[TimberError] = None

        for attempt in range(max_retries + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_data,
                    files=files,
                    headers=self.headers,
                )

                logger.debug(f"{method} {url} -> {response.status_code}")
                self._handle_response_error(response)
                return response

            except (AuthenticationError, ForbiddenError, NotFoundError, ValidationError):
                # Don't retry client errors
                raise
            except RateLimitError as e:
                if attempt < max_retries and e.retry_after:
                    delay = min(e.retry_after, self.MAX_RETRY_DELAY)
                    logger.warning(
                        f"Rate limited, waiting {delay}s before retry "
                        f"(attempt {attempt + 1}/{max_retries + 1})"
                    )
                    await asyncio.sleep(delay)
                    last_exception = e
                    continue
                raise
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                last_exception = TimberConnectionError(
                    f"Cannot connect to Timber API at {self.base_url}: {e}"
                )
                if attempt < max_retries:
                    delay = self._backoff(attempt)
                    logger.warning(
                        f"Connection failed, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries + 1}): {e}"
                    )
                    await asyncio.sleep(delay)
                    continue
            except httpx.TimeoutException as e:
                last_exception = TimberConnectionError(
                    f"Request to Timber API timed out: {e}",
                    error_code=ErrorCode.TIMEOUT,
                )
                if attempt < max_retries:
                    delay = self._backoff(attempt)
                    logger.warning(
                        f"Request timed out, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries + 1})"
                    )
                    await asyncio.sleep(delay)
                    continue
            except ServerError as e:
                last_exception = e
                if attempt < max_retries:
                    delay = self._backoff(attempt)
                    logger.warning(
                        f"Server error, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries + 1}): {e}"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise

        # All retries exhausted
        if last_exception:
            raise last_exception
        raise TimberError("Request failed after all retries")

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return {"success": True}
        try:
            return response.json()
        except ValueError:
            return {"success": True, "message": response.text}

    async def get(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        resource: Optional[str] = None,
        use_cache: bool = True,
    ) -> Any:
        """Make a GET request with optional caching.

        Args:
            endpoint: API endpoint path
            params: Optional query parameters
            resource: Resource path the response is cached under
            use_cache: Whether to use caching

        Returns:
            Response JSON data
        """
        cache_key = None
        if use_cache and self.cache is not None:
            cache_key = self._get_cache_key(endpoint, params, resource)
            cached = await self._get_from_cache(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit for {endpoint}")
                return cached

        response = await self._request_with_retry("GET", endpoint, params=params)
        data = self._decode(response)

        if cache_key is not None:
            await self._set_cache(cache_key, data)

        return data

    async def send(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Any] = None,
        files: Optional[List[Tuple[str, Tuple[Any, ...]]]] = None,
        params: Optional[dict] = None,
        resource: Optional[str] = None,
    ) -> Any:
        """Make a write request (POST, PUT, PATCH, DELETE).

        A successful write invalidates the cached responses of ``resource``.

        Returns:
            Response JSON data
        """
        response = await self._request_with_retry(
            method, endpoint, params=params, json_data=json_data, files=files
        )
        if resource:
            await self.invalidate(resource)
        return self._decode(response)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.send("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.send("PUT", endpoint, **kwargs)

    async def patch(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.send("PATCH", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.send("DELETE", endpoint, **kwargs)
