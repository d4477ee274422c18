"""Invoice service.

Invoices are submitted as multipart forms so the company logo can travel
with the invoice; customer, biller and line items are flattened by the
PayloadEncoder.
"""

import datetime as dt
from typing import Any, List, Literal, Optional, Union

from pydantic import Field, field_validator

from timber.services.base import BaseService, Payload, QueryParams, RequestModel
from timber.services.payload import Attachment, as_attachment


class CustomerDetails(RequestModel):
    """Customer block of an invoice or purchase."""
    customer_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    trn: Optional[str] = None  # Tax registration number
    country_code: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None


class BillerDetails(RequestModel):
    """Biller block of an invoice or purchase."""
    biller_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    country_code: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    trn: Optional[str] = None


class LineItem(RequestModel):
    """Line item of an invoice or purchase."""
    id: Optional[str] = None
    title: Optional[str] = None
    quantity: Optional[float] = None
    rate: Optional[float] = None
    vat: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None


class InvoiceData(RequestModel):
    """Data for creating or updating an invoice.

    Every field is optional so the same model serves partial updates; the
    API enforces required fields on create.
    """
    mode: Optional[Literal["create", "edit"]] = None
    payment_method: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    is_title_changed: Optional[bool] = Field(default=None, alias="isTitleChanged")
    customer: Optional[CustomerDetails] = None
    biller: Optional[BillerDetails] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[Union[dt.datetime, dt.date, str]] = None
    due_date: Optional[Union[dt.datetime, dt.date, str]] = None
    currency: Optional[str] = None
    items: Optional[List[LineItem]] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    sub_total: Optional[float] = None
    vat_total: Optional[float] = None
    discount_total: Optional[float] = None
    shipping: Optional[float] = None
    total: Optional[float] = None
    amount_paid: Optional[float] = None
    amount_due: Optional[float] = None
    logo: Optional[Union[Attachment, str]] = None  # str keeps an existing logo URL
    place_of_supply: Optional[str] = None
    wafeq: Optional[bool] = None
    zoho: Optional[bool] = None

    @field_validator("logo", mode="before")
    @classmethod
    def logo_bytes(cls, value: Any) -> Any:
        # Raw bytes are a file, not a logo URL
        return as_attachment(value)


class InvoiceService(BaseService):
    """Service for customer invoices.

    Example:
        ```python
        invoice = InvoiceData(
            title="Consulting",
            customer=CustomerDetails(name="John Doe", email="john@example.com"),
            items=[LineItem(title="Day rate", quantity=2, rate=800)],
            logo=Attachment.from_path("logo.png"),
        )
        created = await client.invoice.create(invoice)
        ```
    """

    path = "/customer/invoice"

    async def list(self, params: Union[QueryParams, dict, None] = None) -> Any:
        """Fetch a paginated list of invoices."""
        return await self._list(params)

    async def get(self, id: str) -> Any:
        return await self._get(id)

    async def create(self, data: Payload) -> Any:
        """Create an invoice.

        Raises:
            EncodingError: If the payload cannot be flattened; nothing is sent
        """
        return await self._send_form("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        """Update an invoice with the fields that are set."""
        return await self._send_form("PUT", self._item_path(id), data)

    async def delete(self, id: str, remarks: str = "") -> Any:
        """Delete an invoice, recording the reason in ``remarks``."""
        return await self._send_json("DELETE", self._item_path(id), {"remarks": remarks})
