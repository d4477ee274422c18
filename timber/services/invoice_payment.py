"""Invoice payment service."""

import datetime as dt
from typing import Any, Optional, Union

from timber.services.base import BaseService, Payload, QueryParams, RequestModel
from timber.services.payload import Attachment


class InvoicePaymentData(RequestModel):
    """Data for recording a payment against an invoice.

    ``file`` (e.g. a cheque scan) is sent as the ``file`` part.
    """
    invoice: Optional[str] = None  # Invoice ID
    date: Optional[Union[dt.datetime, dt.date, str]] = None
    payment_method: Optional[str] = None
    cheque_no: Optional[str] = None
    cheque_date: Optional[Union[dt.datetime, dt.date, str]] = None
    bank_name: Optional[str] = None
    file: Optional[Attachment] = None
    amount: Optional[Union[float, str]] = None


class InvoicePaymentQueryParams(QueryParams):
    invoice: Optional[str] = None


class InvoicePaymentService(BaseService):
    """Service for invoice payment records.

    Example:
        ```python
        payments = await client.invoice_payment.list(
            InvoicePaymentQueryParams(invoice="invoice-id", page=1, limit=5)
        )
        ```
    """

    path = "/customer/invoice/payment-records"

    async def list(self, params: Union[InvoicePaymentQueryParams, dict, None] = None) -> Any:
        """Fetch the payments recorded against an invoice."""
        return await self._list(params)

    async def get(self, id: str) -> Any:
        return await self._get(id)

    async def create(self, data: Payload) -> Any:
        """Record a new invoice payment."""
        return await self._send_form("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        """Update an invoice payment with the fields that are set."""
        return await self._send_form("PUT", self._item_path(id), data)

    async def delete(self, id: str, remarks: str = "") -> Any:
        """Delete an invoice payment, recording the reason in ``remarks``."""
        return await self._send_json("DELETE", self._item_path(id), {"remarks": remarks})
