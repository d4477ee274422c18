"""Expense category service."""

from typing import Any

from timber.services.base import BaseService, Params, Payload, RequestModel


class ExpenseCategoryRequest(RequestModel):
    category: str


class ExpenseCategoryService(BaseService):
    """Service for expense categories."""

    path = "/customer/expense/category"

    async def list(self, params: Params = None) -> Any:
        return await self._list(params)

    async def create(self, data: Payload) -> Any:
        return await self._send_json("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        return await self._send_json("PUT", self._item_path(id), data)

    async def delete(self, id: str) -> Any:
        return await self._send_json("DELETE", self._item_path(id))
