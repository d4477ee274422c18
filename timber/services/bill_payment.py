"""Bill payment service."""

import datetime as dt
from typing import Any, Literal, Optional, Union

from pydantic import field_validator

from timber.services.base import BaseService, Payload, QueryParams, RequestModel
from timber.services.payload import Attachment

PaymentMethod = Literal["cash", "bank", "card", "cheque", "net_banking", "other"]


class BillPaymentData(RequestModel):
    """Data for recording a payment against a purchase bill."""
    invoice: Optional[str] = None  # Purchase ID
    date: Optional[Union[dt.datetime, dt.date, str]] = None
    payment_method: Optional[PaymentMethod] = None
    cheque_no: Optional[str] = None
    cheque_date: Optional[Union[dt.datetime, dt.date, str]] = None
    cheque_due_date: Optional[Union[dt.datetime, dt.date, str]] = None
    amount: Optional[float] = None
    bank_name: Optional[str] = None
    is_paid: Optional[bool] = None
    file: Optional[Attachment] = None

    @field_validator("file", mode="before")
    @classmethod
    def first_file(cls, value: Any) -> Any:
        # Only one receipt is accepted per payment
        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value


class BillPaymentQueryParams(QueryParams):
    invoice: Optional[str] = None


class BillPaymentService(BaseService):
    """Service for bill payments."""

    path = "/customer/purchase/payment-record"

    async def list(self, params: Union[BillPaymentQueryParams, dict, None] = None) -> Any:
        """Fetch a paginated list of bill payments, optionally for one bill."""
        return await self._list(params)

    async def create(self, data: Payload) -> Any:
        """Record a bill payment.

        Example:
            ```python
            payment = BillPaymentData(
                invoice="purchase-id",
                date="2025-06-23",
                payment_method="cheque",
                cheque_no="123456789",
                amount=45.75,
                file=Attachment.from_path("cheque.jpg"),
            )
            response = await client.bill_payment.create(payment)
            ```
        """
        return await self._send_form("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        return await self._send_form("PUT", self._item_path(id), data)

    async def delete(self, id: str) -> Any:
        return await self._send_json("DELETE", self._item_path(id))
