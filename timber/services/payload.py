"""Multipart form encoding for nested request payloads.

The purchase, invoice and payment endpoints accept ``multipart/form-data``
bodies in which nested records are spelled with bracketed keys::

    customer[name]=John Doe
    items[0][title]=Item 1
    items[0][rate]=100
    file=<binary>

This module provides:
- Tagged value types (Scalar, FlatObject, ObjectArray, Attachment, ABSENT)
- PayloadEncoder, which resolves a request model into those types and
  flattens it into ordered (key, value) pairs
- to_multipart, which turns the pairs into httpx ``files=`` parts
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from timber.core.errors import EncodingError, ErrorCode

logger = logging.getLogger(__name__)


# =============================================================================
# Value Types
# =============================================================================


Primitive = Union[str, int, float, Decimal, bool, date, datetime, Enum]

# datetime is a subclass of date, bool a subclass of int
_PRIMITIVE_TYPES = (str, int, float, Decimal, date, Enum)


@dataclass(frozen=True)
class Attachment:
    """Binary file sent as a multipart file part.

    Attributes:
        content: Raw file bytes
        filename: File name reported to the API
        content_type: MIME type; guessed from the file name when None
    """
    content: bytes
    filename: str = "file"
    content_type: Optional[str] = None

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        content_type: Optional[str] = None,
    ) -> "Attachment":
        """Read a file from disk into an Attachment."""
        path = Path(path)
        return cls(content=path.read_bytes(), filename=path.name, content_type=content_type)

    @property
    def is_empty(self) -> bool:
        return len(self.content) == 0


def as_attachment(value: Any) -> Any:
    """Wrap raw bytes in an Attachment; other values are returned unchanged."""
    if isinstance(value, (bytes, bytearray)):
        return Attachment(content=bytes(value))
    return value


@dataclass(frozen=True)
class Scalar:
    """A single plain value (string, number, boolean or date)."""
    value: Primitive


@dataclass(frozen=True)
class FlatObject:
    """A one-level record such as a customer or biller."""
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class ObjectArray:
    """An ordered list of records (line items) or plain values."""
    items: Sequence[Any]


class _Absent:
    """Marker for a field that was omitted."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

EncodableValue = Union[Scalar, FlatObject, ObjectArray, Attachment, _Absent]
EncodableRequest = Dict[str, EncodableValue]
FormValue = Union[str, Attachment]
FormPair = Tuple[str, FormValue]

_NESTED_TYPES = (Mapping, list, tuple, BaseModel, FlatObject, ObjectArray)


def _is_empty_file(value: Any) -> bool:
    return isinstance(value, Attachment) and value.is_empty


# =============================================================================
# Value Rendering
# =============================================================================


def format_timestamp(value: Union[date, datetime]) -> str:
    """Render a date or datetime as an ISO-8601 UTC timestamp.

    Milliseconds are always present (``2025-06-23T00:00:00.000Z``). Naive
    datetimes are taken as UTC and a bare date is midnight UTC.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)

    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S}.{value.microsecond // 1000:03d}Z"


def stringify(value: Primitive) -> str:
    """Render a plain value as form field text.

    Booleans become ``"true"``/``"false"``, integral floats drop their
    fractional part and dates use ``format_timestamp``. Other floats use
    Python's shortest round-trip form, so very small or large values keep
    an exponent (``1e-07``).

    Raises:
        EncodingError: If the value is not a plain value, or is a NaN or
            infinite number
    """
    if isinstance(value, Enum):
        return stringify(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return format_timestamp(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodingError(
                f"Cannot send non-finite number {value!r}",
                error_code=ErrorCode.ENCODING_UNSUPPORTED_TYPE,
            )
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, Decimal) and not value.is_finite():
        raise EncodingError(
            f"Cannot send non-finite number {value}",
            error_code=ErrorCode.ENCODING_UNSUPPORTED_TYPE,
        )
    if isinstance(value, (Decimal, str)):
        return str(value)

    raise EncodingError(
        f"Cannot render value of type {type(value).__name__!r} as form text",
        error_code=ErrorCode.ENCODING_UNSUPPORTED_TYPE,
    )


def model_items(model: BaseModel) -> Iterator[Tuple[str, Any]]:
    """Yield a model's fields (by alias) in declaration order, then extra fields."""
    for name, field in type(model).model_fields.items():
        yield field.alias or name, getattr(model, name)
    for name, value in (model.model_extra or {}).items():
        yield name, value


# =============================================================================
# Encoder
# =============================================================================


class PayloadEncoder:
    """Flattens request payloads into ordered multipart form pairs.

    Rules:
    - Scalar ``k``: one pair ``(k, text)``
    - FlatObject ``k``: ``(k[sub], text)`` for every truthy sub-value; empty
      strings, None, False and 0 are skipped
    - ObjectArray ``k``: ``(k[i][sub], text)`` for record elements and
      ``(k, value)`` for plain/file elements, in index order; empty files
      are skipped
    - Attachment: ``(attachment_field, file)`` after every other pair, only
      when the file is not empty
    - ABSENT: nothing

    The encoder holds no state besides its configuration and may be shared
    between concurrent callers.

    Example:
        ```python
        encoder = PayloadEncoder()
        pairs = encoder.encode_model(vendor_payment_request)
        response = await http.post("/customer/purchase", files=to_multipart(pairs))
        ```
    """

    DEFAULT_ATTACHMENT_FIELD = "file"

    def __init__(self, attachment_field: str = DEFAULT_ATTACHMENT_FIELD):
        """Initialize PayloadEncoder.

        Args:
            attachment_field: Wire name used for top-level attachments
                (``logo`` and ``file`` fields are both sent under it)
        """
        self.attachment_field = attachment_field

    # =========================================================================
    # Request Construction
    # =========================================================================

    def resolve(self, key: str, value: Any) -> EncodableValue:
        """Resolve a raw field value into its tagged value type.

        Raises:
            EncodingError: If the value has an unsupported type
        """
        if value is None or value is ABSENT:
            return ABSENT
        if isinstance(value, (Scalar, FlatObject, ObjectArray, Attachment)):
            return value
        if isinstance(value, (bytes, bytearray)):
            return Attachment(content=bytes(value))
        if isinstance(value, BaseModel):
            return FlatObject(dict(model_items(value)))
        if isinstance(value, Mapping):
            return FlatObject(dict(value))
        if isinstance(value, (list, tuple)):
            return ObjectArray([self._resolve_element(element) for element in value])
        if isinstance(value, _PRIMITIVE_TYPES):
            return Scalar(value)

        raise EncodingError(
            f"Field '{key}' has unsupported type {type(value).__name__!r}",
            error_code=ErrorCode.ENCODING_UNSUPPORTED_TYPE,
            details={"field": key},
        )

    def _resolve_element(self, element: Any) -> Any:
        if isinstance(element, BaseModel):
            return dict(model_items(element))
        if isinstance(element, (bytes, bytearray)):
            return Attachment(content=bytes(element))
        return element

    def build_request(self, data: Union[BaseModel, Mapping[str, Any]]) -> EncodableRequest:
        """Resolve every field of a request model or mapping, keeping field order."""
        items = model_items(data) if isinstance(data, BaseModel) else data.items()
        return {key: self.resolve(key, value) for key, value in items}

    # =========================================================================
    # Encoding
    # =========================================================================

    def encode(self, request: Mapping[str, EncodableValue]) -> List[FormPair]:
        """Flatten a resolved request into ordered form pairs.

        Args:
            request: Field name to tagged value, in submission order

        Returns:
            List of (key, text or Attachment) pairs; keys may repeat

        Raises:
            EncodingError: If a record is nested more than one level deep or
                a list element is empty or itself a list
        """
        pairs: List[FormPair] = []
        attachments: List[Attachment] = []

        for key, value in request.items():
            if isinstance(value, _Absent):
                continue
            elif isinstance(value, Attachment):
                attachments.append(value)
            elif isinstance(value, Scalar):
                pairs.append((key, stringify(value.value)))
            elif isinstance(value, FlatObject):
                pairs.extend(self._encode_object(key, value))
            elif isinstance(value, ObjectArray):
                pairs.extend(self._encode_array(key, value))
            else:
                raise EncodingError(
                    f"Field '{key}' was not resolved to an encodable value",
                    error_code=ErrorCode.ENCODING_UNSUPPORTED_TYPE,
                    details={"field": key},
                )

        for attachment in attachments:
            if not attachment.is_empty:
                pairs.append((self.attachment_field, attachment))

        logger.debug(f"Encoded {len(request)} fields into {len(pairs)} form pairs")
        return pairs

    def encode_model(self, data: Union[BaseModel, Mapping[str, Any]]) -> List[FormPair]:
        """Resolve and encode a request model or mapping in one step."""
        return self.encode(self.build_request(data))

    def _encode_object(self, key: str, obj: FlatObject) -> Iterator[FormPair]:
        for sub_key, sub_value in obj.fields.items():
            path = f"{key}[{sub_key}]"
            self._check_flat(path, sub_value)
            if isinstance(sub_value, Scalar):
                sub_value = sub_value.value
            if isinstance(sub_value, Attachment):
                if sub_value.is_empty:
                    continue
            elif not sub_value:
                continue
            yield path, self._form_value(path, sub_value)

    def _encode_array(self, key: str, array: ObjectArray) -> Iterator[FormPair]:
        for index, element in enumerate(array.items):
            if isinstance(element, BaseModel):
                element = dict(model_items(element))

            if isinstance(element, Mapping):
                for sub_key, sub_value in element.items():
                    path = f"{key}[{index}][{sub_key}]"
                    self._check_flat(path, sub_value)
                    if sub_value is None or sub_value is ABSENT:
                        continue
                    form_value = self._form_value(path, sub_value)
                    if not _is_empty_file(form_value):
                        yield path, form_value
            elif element is None or isinstance(element, _NESTED_TYPES + (_Absent,)):
                raise EncodingError(
                    f"Element {index} of '{key}' is neither a record nor a plain value",
                    error_code=ErrorCode.ENCODING_INVALID_ELEMENT,
                    details={"field": key, "index": index},
                )
            else:
                form_value = self._form_value(key, element)
                if not _is_empty_file(form_value):
                    yield key, form_value

    def _check_flat(self, path: str, value: Any) -> None:
        if isinstance(value, _NESTED_TYPES):
            raise EncodingError(
                f"Field '{path}' is nested more than one level deep",
                error_code=ErrorCode.ENCODING_UNSUPPORTED_NESTING,
                details={"field": path},
            )

    def _form_value(self, path: str, value: Any) -> FormValue:
        if isinstance(value, Scalar):
            value = value.value
        if isinstance(value, Attachment):
            return value
        if isinstance(value, (bytes, bytearray)):
            return Attachment(content=bytes(value))
        if isinstance(value, (bool,) + _PRIMITIVE_TYPES):
            return stringify(value)

        raise EncodingError(
            f"Field '{path}' has unsupported type {type(value).__name__!r}",
            error_code=ErrorCode.ENCODING_UNSUPPORTED_TYPE,
            details={"field": path},
        )


# =============================================================================
# Multipart Parts
# =============================================================================


def to_multipart(pairs: Sequence[FormPair]) -> List[Tuple[str, Tuple[Any, ...]]]:
    """Convert form pairs into an ordered httpx ``files=`` list.

    Text values become file-less form fields ``(None, text)`` so the whole
    body keeps the encoder's order, including repeated keys.
    """
    parts: List[Tuple[str, Tuple[Any, ...]]] = []
    for key, value in pairs:
        if isinstance(value, Attachment):
            parts.append((key, (value.filename, value.content, value.content_type)))
        else:
            parts.append((key, (None, value)))
    return parts
