"""
Guest-related Pydantic schemas
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from .common import WireModel
from .options import GuestCustomData
from .status import GuestStatus, derive_guest_status

class Guest(WireModel):
    """Guest record as returned by the backend"""
    id: int = Field(validation_alias=AliasChoices("ID", "id", "guestID", "GuestID"))
    project_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ProjectID", "projectID", "projectId")
    )
    event_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("EventID", "eventID", "eventId")
    )
    name: str = Field(validation_alias=AliasChoices("Name", "name", "guestName", "GuestName"))
    email: Optional[str] = Field(default=None, validation_alias=AliasChoices("Email", "email"))
    phone: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("Phone", "phone", "phoneNumber", "PhoneNumber")
    )
    custom_data: GuestCustomData = Field(
        default_factory=GuestCustomData,
        validation_alias=AliasChoices("Options", "options", "customData", "CustomData"),
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("CreatedAt", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("UpdatedAt", "updatedAt")
    )

    @field_validator("custom_data", mode="before")
    @classmethod
    def _parse_custom_data(cls, value: Any) -> GuestCustomData:
        if isinstance(value, GuestCustomData):
            return value
        return GuestCustomData.parse(value)

    @property
    def status(self) -> GuestStatus:
        return derive_guest_status(self.custom_data)

class GuestCreate(BaseModel):
    """Payload for creating a guest"""

    model_config = ConfigDict(populate_by_name=True)

    event_id: int = Field(serialization_alias="eventID")
    name: str = Field(serialization_alias="guestName")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, serialization_alias="phoneNumber")
    custom_data: GuestCustomData = Field(
        default_factory=GuestCustomData, serialization_alias="customData"
    )

    @field_serializer("custom_data")
    def _serialize_custom_data(self, custom_data: GuestCustomData) -> str:
        return custom_data.to_json()

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)

class GuestUpdate(GuestCreate):
    """Full-overwrite update payload; every mutable field must be supplied"""

    @classmethod
    def from_guest(cls, guest: Guest, event_id: Optional[int] = None) -> "GuestUpdate":
        return cls(
            event_id=event_id if event_id is not None else guest.event_id,
            name=guest.name,
            email=guest.email,
            phone=guest.phone,
            custom_data=guest.custom_data.model_copy(deep=True),
        )

class GuestForm(BaseModel):
    """Guest fields as submitted to the console; the event comes from the URL"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    custom_data: Dict[str, Any] = Field(default_factory=dict)

    def to_create(self, event_id: int) -> GuestCreate:
        return self._build(GuestCreate, event_id)

    def to_update(self, event_id: int) -> GuestUpdate:
        return self._build(GuestUpdate, event_id)

    def _build(self, model, event_id: int):
        return model(
            event_id=event_id,
            name=self.name,
            email=self.email,
            phone=self.phone,
            custom_data=GuestCustomData.model_validate(self.custom_data),
        )

class AssignmentRequest(BaseModel):
    """Hotel/room assignment for one guest"""
    hotel: Optional[str] = None
    room: Optional[str] = None
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None

class ScanRequest(BaseModel):
    """Raw text read from a guest QR code"""
    payload: str
