"""Salary service.

Salaries are generated per month for every active employee; there is no
delete endpoint.
"""

from typing import Any, Optional

from pydantic import Field

from timber.services.base import BaseService, Params, Payload, RequestModel


class CreateSalaryRequest(RequestModel):
    """Month to generate salaries for."""
    month: int = Field(ge=1, le=12)
    year: int


class UpdateSalaryRequest(RequestModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None


class SalaryService(BaseService):
    """Service for monthly salaries."""

    path = "/customer/salary"

    async def list(self, params: Params = None) -> Any:
        return await self._list(params)

    async def get(self, id: str) -> Any:
        return await self._get(id)

    async def create(self, data: Payload) -> Any:
        return await self._send_json("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        return await self._send_json("PUT", self._item_path(id), data)
