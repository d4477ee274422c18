"""Vendor payment (purchase) service."""

import datetime as dt
from typing import Any, List, Optional, Union

from pydantic import field_validator

from timber.services.base import BaseService, Params, Payload, RequestModel
from timber.services.invoice import BillerDetails, CustomerDetails, LineItem
from timber.services.payload import Attachment, as_attachment


class VendorPaymentData(RequestModel):
    """Data for creating or updating a vendor payment.

    The ``logo`` attachment is sent as the ``file`` part.
    """
    title: Optional[str] = None
    customer: Optional[CustomerDetails] = None
    biller: Optional[BillerDetails] = None
    invoice_number: Optional[str] = None
    order_number: Optional[str] = None
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
    logo: Optional[Attachment] = None
    status: Optional[str] = None

    @field_validator("logo", mode="before")
    @classmethod
    def logo_bytes(cls, value: Any) -> Any:
        return as_attachment(value)


class VendorPaymentService(BaseService):
    """Service for vendor payments (purchases).

    Example:
        ```python
        payment = VendorPaymentData(
            title="Vendor Payment",
            customer=CustomerDetails(name="John Doe", email="j@x.com", mobile="123"),
            items=[LineItem(title="Item 1", quantity=1, rate=100)],
            logo=Attachment.from_path("receipt.pdf"),
        )
        created = await client.vendor_payment.create(payment)
        ```
    """

    path = "/customer/purchase"

    async def list(self, params: Params = None) -> Any:
        """Fetch a paginated list of vendor payments.

        Args:
            params: Query options like page, limit, filters, sort
        """
        return await self._list(params)

    async def get(self, id: str) -> Any:
        return await self._get(id)

    async def create(self, data: Payload) -> Any:
        """Create a vendor payment.

        Raises:
            EncodingError: If the payload cannot be flattened; nothing is sent
        """
        return await self._send_form("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        return await self._send_form("PUT", self._item_path(id), data)

    async def delete(self, id: str) -> Any:
        """Delete (archive) a vendor payment."""
        return await self._send_json("PATCH", self._item_path(id))
