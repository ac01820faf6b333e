"""
Decoding helpers shared by the per-resource API classes
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from checkin_console.core.errors import DecodeError
from checkin_console.schemas.common import ListResponse, Pagination
from checkin_console.services.transport import ApiClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DATA_KEYS = ("Data", "data")
PAGINATION_KEYS = ("Pagination", "pagination")
ENVELOPE_KEYS = ("Error", "error", "Message", "message", "Success", "success", "Status", "status", "Code", "code")


def _first_present(body: dict, keys: tuple) -> Any:
    for key in keys:
        if key in body:
            return body[key]
    return None


def unwrap_record(body: Any) -> Optional[dict]:
    """Return the record carried by a single-item response, if any"""
    if not isinstance(body, dict):
        return None
    data = _first_present(body, DATA_KEYS)
    if isinstance(data, dict):
        return data
    if data is None and not any(key in body for key in DATA_KEYS):
        # Bare record; envelope-only bodies such as {"Error": false} carry none
        meaningful = {k: v for k, v in body.items() if k not in ENVELOPE_KEYS}
        return meaningful or None
    return None


def decode_record(model: Type[M], data: dict) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Malformed {model.__name__} record: {e.error_count()} invalid field(s)", payload=data) from e


def decode_list(model: Type[M], body: Any) -> ListResponse[M]:
    """Decode a list response; pagination is optional, the item array is not"""
    if not isinstance(body, dict):
        raise DecodeError(f"Malformed {model.__name__} list: expected an object", payload=body)

    items = _first_present(body, DATA_KEYS)
    if items is None and any(key in body for key in DATA_KEYS):
        items = []
    if not isinstance(items, list):
        raise DecodeError(f"Malformed {model.__name__} list: missing item array", payload=body)

    records = [decode_record(model, item) for item in items]

    pagination = None
    raw_pagination = _first_present(body, PAGINATION_KEYS)
    if isinstance(raw_pagination, dict):
        try:
            pagination = Pagination.model_validate(raw_pagination)
        except ValidationError:
            logger.warning(f"Ignoring unreadable pagination block: {raw_pagination}")

    return ListResponse[model](items=records, pagination=pagination)


class ResourceApi:
    """Base for one backend resource"""

    def __init__(self, client: ApiClient):
        self.client = client

    def _created(self, model: Type[M], body: Any) -> M:
        record = unwrap_record(body)
        if record is None:
            raise DecodeError(f"Malformed response: no {model.__name__} record returned", payload=body)
        return decode_record(model, record)

    def _maybe_record(self, model: Type[M], body: Any) -> Optional[M]:
        record = unwrap_record(body)
        if record is None:
            return None
        return decode_record(model, record)
