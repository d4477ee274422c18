"""Timber API client.

``create_client`` builds a TimberClient whose services share one
TimberHTTPClient transport.
"""

import logging
from typing import Optional

import httpx
from redis.asyncio import Redis

from timber.core.config import Settings, settings as default_settings
from timber.core.errors import ConfigurationError
from timber.services.bill_payment import BillPaymentService
from timber.services.customer import CustomerService
from timber.services.employee import EmployeeService
from timber.services.expense import ExpenseService
from timber.services.expense_category import ExpenseCategoryService
from timber.services.http import TimberHTTPClient
from timber.services.invoice import InvoiceService
from timber.services.invoice_payment import InvoicePaymentService
from timber.services.payload import PayloadEncoder
from timber.services.raw_expense import RawExpenseService
from timber.services.salary import SalaryService
from timber.services.tax_rate import TaxRateService
from timber.services.vendor_payment import VendorPaymentService

logger = logging.getLogger(__name__)


class TimberClient:
    """Entry point to every Timber entity service.

    Example:
        ```python
        async with create_client("your-api-key") as client:
            expenses = await client.expense.list({"page": 1, "limit": 10})
        ```
    """

    def __init__(self, http: TimberHTTPClient, encoder: Optional[PayloadEncoder] = None):
        self.http = http
        self._owned_cache: Optional[Redis] = None
        encoder = encoder or PayloadEncoder()

        self.expense = ExpenseService(http, encoder)
        self.expense_category = ExpenseCategoryService(http, encoder)
        self.raw_expense = RawExpenseService(http, encoder)
        self.vendor_payment = VendorPaymentService(http, encoder)
        self.bill_payment = BillPaymentService(http, encoder)
        self.invoice = InvoiceService(http, encoder)
        self.invoice_payment = InvoicePaymentService(http, encoder)
        self.customer = CustomerService(http, encoder)
        self.tax_rate = TaxRateService(http, encoder)
        self.employee = EmployeeService(http, encoder)
        self.salary = SalaryService(http, encoder)

    async def close(self) -> None:
        """Close the transport and the cache connection it owns."""
        await self.http.close()
        if self._owned_cache is not None:
            await self._owned_cache.aclose()
            self._owned_cache = None

    async def __aenter__(self) -> "TimberClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_client(
    api_key: Optional[str] = None,
    *,
    base_url: Optional[str] = None,
    cache: Optional[Redis] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    config: Optional[Settings] = None,
) -> TimberClient:
    """Create a TimberClient.

    Args:
        api_key: API key; defaults to ``TIMBER_API_KEY``
        base_url: Server URL without the SDK prefix; defaults to ``TIMBER_BASE_URL``
        cache: Optional Redis client for GET caching; when omitted one is
            created from ``TIMBER_REDIS_URL`` if that is set
        http_client: Optional preconfigured httpx client
        config: Settings to read defaults from

    Raises:
        ConfigurationError: If no API key is available
    """
    config = config or default_settings
    api_key = api_key or config.api_key
    if not api_key:
        raise ConfigurationError("API key is required")

    base_url = (base_url or config.base_url).rstrip("/")
    owned_cache = None
    if cache is None and config.redis_url:
        cache = owned_cache = Redis.from_url(config.redis_url)
        logger.debug("GET caching enabled")

    http = TimberHTTPClient(
        base_url=f"{base_url}{config.api_prefix}",
        api_key=api_key,
        cache=cache,
        cache_ttl=config.cache_ttl,
        timeout=config.timeout,
        max_retries=config.max_retries,
        initial_retry_delay=config.initial_retry_delay,
        max_retry_delay=config.max_retry_delay,
        http_client=http_client,
    )
    client = TimberClient(http)
    client._owned_cache = owned_cache
    return client
