"""Shared plumbing for Timber entity services."""

from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter

from timber.core.errors import ValidationError
from timber.core.logging import LoggerAdapter, get_logger
from timber.services.http import TimberHTTPClient
from timber.services.payload import PayloadEncoder, to_multipart


class RequestModel(BaseModel):
    """Base for request payloads; unknown fields are passed through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class QueryParams(BaseModel):
    """Common list query options. Only fields that are set are sent."""

    model_config = ConfigDict(extra="allow")

    page: Optional[int] = None
    limit: Optional[int] = None
    sort: Optional[str] = None
    filters: Optional[str] = None


Params = Union[QueryParams, Mapping[str, Any], None]
Payload = Union[BaseModel, Mapping[str, Any]]

# Renders dates, decimals and nested models in plain mappings like model_dump
_MAPPING_ADAPTER = TypeAdapter(Dict[str, Any])


class BaseService:
    """Base class of entity services.

    Each service wraps one REST collection (``path``) and shares the
    client's transport, which is injected at construction.
    """

    path: str = ""

    def __init__(self, http: TimberHTTPClient, encoder: Optional[PayloadEncoder] = None):
        self.http = http
        self.encoder = encoder or PayloadEncoder()
        self.logger = LoggerAdapter(
            get_logger(f"services.{type(self).__name__}"),
            {"resource": self.path},
        )

    def _item_path(self, id: str) -> str:
        if not id:
            raise ValidationError(f"{type(self).__name__}: ID is required")
        return f"{self.path}/{id}"

    @staticmethod
    def _query(params: Params) -> Optional[dict]:
        if params is None:
            return None
        if isinstance(params, BaseModel):
            params = params.model_dump(exclude_none=True)
        query = {key: value for key, value in params.items() if value is not None}
        return query or None

    @staticmethod
    def _json(data: Payload) -> Any:
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json", exclude_none=True, by_alias=True)
        return _MAPPING_ADAPTER.dump_python(dict(data), mode="json")

    async def _list(self, params: Params = None) -> Any:
        return await self.http.get(self.path, params=self._query(params), resource=self.path)

    async def _get(self, id: str) -> Any:
        return await self.http.get(self._item_path(id), resource=self.path)

    async def _send_json(self, method: str, endpoint: str, data: Optional[Payload] = None) -> Any:
        json_data = self._json(data) if data is not None else None
        return await self.http.send(method, endpoint, json_data=json_data, resource=self.path)

    async def _send_form(self, method: str, endpoint: str, data: Payload) -> Any:
        # Encoding errors surface here, before any request is made
        pairs = self.encoder.encode_model(data)
        self.logger.debug(f"{method} {endpoint} with {len(pairs)} form parts")
        return await self.http.send(
            method, endpoint, files=to_multipart(pairs), resource=self.path
        )
