"""Customer service."""

from typing import Any, Optional

from timber.services.base import BaseService, Params, Payload, RequestModel


class CustomerData(RequestModel):
    """Customer record. Additional fields are passed through to the API."""
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    country_code: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    role: Optional[str] = None
    address: Optional[str] = None
    trn: Optional[str] = None


class CustomerService(BaseService):
    """Service for customers."""

    path = "/customer/customer"

    async def list(self, params: Params = None) -> Any:
        return await self._list(params)

    async def create(self, data: Payload) -> Any:
        return await self._send_json("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        return await self._send_json("PUT", self._item_path(id), data)

    async def delete(self, id: str) -> Any:
        return await self._send_json("DELETE", self._item_path(id))
