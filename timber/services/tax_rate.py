"""Tax rate service (read only)."""

from typing import Any

from timber.services.base import BaseService, Params


class TaxRateService(BaseService):
    path = "/customer/tax-rate"

    async def list(self, params: Params = None) -> Any:
        return await self._list(params)

    async def get(self, id: str) -> Any:
        return await self._get(id)
