"""Expense service."""

import datetime as dt
from typing import Any, Optional, Union

from timber.services.base import BaseService, Params, Payload, RequestModel


class CreateExpenseRequest(RequestModel):
    """Data for creating an expense."""
    type: str
    merchant: str
    category: str
    date: Union[dt.date, str]  # YYYY-MM-DD
    payment_method: str
    amount: float


class UpdateExpenseRequest(RequestModel):
    """Partial expense update; only set fields are sent."""
    type: Optional[str] = None
    merchant: Optional[str] = None
    category: Optional[str] = None
    date: Optional[Union[dt.date, str]] = None
    payment_method: Optional[str] = None
    amount: Optional[float] = None


class ExpenseService(BaseService):
    """Service for managing expenses.

    Example:
        ```python
        client = create_client("your-api-key")
        expenses = await client.expense.list({"page": 1, "limit": 10})
        ```
    """

    path = "/customer/expense"

    async def list(self, params: Params = None) -> Any:
        """Fetch a paginated list of expenses.

        Args:
            params: Query options like page, limit, filters, sort

        Returns:
            Expenses matching the query
        """
        return await self._list(params)

    async def get(self, id: str) -> Any:
        """Fetch a single expense by ID."""
        return await self._get(id)

    async def create(self, data: Payload) -> Any:
        """Create a new expense.

        Example:
            ```python
            response = await client.expense.create(CreateExpenseRequest(
                type="travel",
                merchant="Uber",
                category="Transportation",
                date="2025-06-23",
                payment_method="credit_card",
                amount=45.75,
            ))
            ```
        """
        return await self._send_json("POST", self.path, data)

    async def update(self, id: str, data: Payload) -> Any:
        """Update an existing expense."""
        return await self._send_json("PUT", self._item_path(id), data)

    async def delete(self, id: str) -> Any:
        """Delete an expense by ID.

        The API archives expenses, so this is a PATCH on the expense.
        """
        return await self._send_json("PATCH", self._item_path(id))
