"""Employee service."""

import datetime as dt
from typing import Any, Optional, Union

from timber.services.base import BaseService, Params, Payload, RequestModel


class CreateEmployeeRequest(RequestModel):
    """Data for creating an employee."""
    employee_id: str
    name: str
    designation: str
    mobile: str
    country_code: str
    basic_salary: float
    allowance: float
    joining_date: Union[dt.date, str]  # YYYY-MM-DD
    is_active: bool = True


class UpdateEmployeeRequest(RequestModel):
    """Partial employee update."""
    employee_id: Optional[str] = None
    name: Optional[str] = None
    designation: Optional[str] = None
    mobile: Optional[str] = None
    country_code: Optional[str] = None
    basic_salary: Optional[float] = None
    allowance: Optional[float] = None
    joining_date: Optional[Union[dt.date, str]] = None
    is_active: Optional[bool] = None


class EmployeeService(BaseService):
    """Service for employees.

    Example:
        ```python
        employees = await client.employee.list({"page": 1, "limit": 20, "sort": "name"})
        ```
    """

    path = "/customer/employee"

    async def list(self, params: Params = None) -> Any:
        return await self._list(params)

    async def get(self, id: str) -> Any:
        return await self._get(id)

    async def create(self, data: Payload) -> Any:
        return await self._send_json("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        return await self._send_json("PUT", self._item_path(id), data)

    async def delete(self, id: str) -> Any:
        return await self._send_json("DELETE", self._item_path(id))
