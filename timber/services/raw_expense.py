"""Raw expense service.

Raw expenses are receipts uploaded as files; the API extracts the expense
from them asynchronously.
"""

from typing import Any, Union

from timber.services.base import BaseService, Params, RequestModel
from timber.services.payload import Attachment


class CreateRawExpenseRequest(RequestModel):
    """Receipt upload."""
    file: Attachment


class RawExpenseService(BaseService):
    """Service for raw (unprocessed) expense uploads."""

    path = "/customer/expense/raw"

    async def list(self, params: Params = None) -> Any:
        """Fetch a paginated list of raw expenses."""
        return await self._list(params)

    async def create(self, data: Union[CreateRawExpenseRequest, Attachment]) -> Any:
        """Upload a receipt file.

        Args:
            data: The request or the Attachment itself

        Returns:
            The created raw expense
        """
        if isinstance(data, Attachment):
            data = CreateRawExpenseRequest(file=data)
        return await self._send_form("POST", self.path, data)

    async def delete(self, id: str) -> Any:
        return await self._send_json("DELETE", self._item_path(id))
