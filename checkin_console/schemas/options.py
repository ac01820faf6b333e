"""
Embedded JSON sub-documents carried by events and guests.

Events store an ``Options`` document listing the hotels and rooms that can be
assigned. Guests store a ``customData`` document with their assignment and
check-in timestamps. Both travel as JSON text inside the record and may hold
keys this console does not know about, which must survive a round trip.
"""

import copy
import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ModelWrapValidatorHandler, PrivateAttr, field_validator, model_validator

logger = logging.getLogger(__name__)


def parse_options(raw: Union[str, bytes, Dict[str, Any], None]) -> Dict[str, Any]:
    """Decode an embedded JSON document; anything unusable becomes ``{}``"""
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return {}
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        logger.debug(f"Discarding malformed options document: {raw[:80]!r}")
        return {}
    return value if isinstance(value, dict) else {}


def stringify_options(options: Union[Dict[str, Any], BaseModel, None]) -> str:
    """Encode an embedded document as compact JSON"""
    if options is None:
        return "{}"
    if isinstance(options, _Document):
        options = options.to_dict()
    elif isinstance(options, BaseModel):
        options = options.model_dump(by_alias=True, exclude_unset=True)
    return json.dumps(options, separators=(",", ":"), ensure_ascii=False)


class _Document(BaseModel):
    """Typed view over a free-form document.

    Only the exact wire key fills a field; other spellings land in
    ``model_extra`` untouched. Values the typed view had to coerce are
    remembered and written back as received unless the field is reassigned.
    """

    model_config = ConfigDict(extra="allow")

    _originals: Dict[str, Tuple[Any, Any]] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_originals(cls, data: Any, handler: ModelWrapValidatorHandler) -> "_Document":
        document = handler(data)
        if isinstance(data, dict):
            for name, field in cls.model_fields.items():
                key = field.alias or name
                if key in data:
                    coerced = getattr(document, name)
                    if coerced != data[key]:
                        document._originals[key] = (data[key], copy.deepcopy(coerced))
        return document

    def __setattr__(self, name: str, value: Any) -> None:
        field = type(self).model_fields.get(name)
        if field is not None:
            self._originals.pop(field.alias or name, None)
        super().__setattr__(name, value)

    @classmethod
    def parse(cls, raw: Union[str, bytes, Dict[str, Any], None]):
        return cls.model_validate(parse_options(raw))

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_unset=True)
        for key, (raw, coerced) in self._originals.items():
            if key in data and data[key] == coerced:
                data[key] = copy.deepcopy(raw)
        return data

    def to_json(self) -> str:
        return stringify_options(self.to_dict())

    @property
    def extra(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class EventOptions(_Document):
    """Options document of an event"""

    hotels: List[str] = Field(default_factory=list, alias="Hotels")
    rooms: List[str] = Field(default_factory=list, alias="Rooms")

    @field_validator("hotels", "rooms", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            return []
        names = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("Name") or item.get("name")
            if item is not None and not isinstance(item, (dict, list)):
                names.append(str(item))
        return names


class GuestCustomData(_Document):
    """Custom-data document of a guest"""

    hotel: Optional[str] = Field(default=None, alias="Hotel")
    room: Optional[str] = Field(default=None, alias="Room")
    check_in_date: Optional[str] = Field(default=None, alias="CheckInDate")
    check_out_date: Optional[str] = Field(default=None, alias="CheckOutDate")
    checked_in_at: Optional[str] = Field(default=None, alias="CheckedInAt")
    checked_out_at: Optional[str] = Field(default=None, alias="CheckedOutAt")

    @field_validator(
        "hotel", "room", "check_in_date", "check_out_date",
        "checked_in_at", "checked_out_at",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value, separators=(",", ":"))
        return str(value)

    @property
    def is_assigned(self) -> bool:
        return bool(self.hotel or self.room)
