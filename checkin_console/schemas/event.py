"""
Event-related Pydantic schemas
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from .common import WireModel
from .options import EventOptions

class Event(WireModel):
    """Event record as returned by the backend"""
    id: int = Field(validation_alias=AliasChoices("ID", "id", "eventID", "EventID"))
    project_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ProjectID", "projectID", "projectId")
    )
    name: str = Field(validation_alias=AliasChoices("Name", "name", "eventName", "EventName"))
    description: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("Description", "description")
    )
    options: EventOptions = Field(
        default_factory=EventOptions, validation_alias=AliasChoices("Options", "options")
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("CreatedAt", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("UpdatedAt", "updatedAt")
    )

    @field_validator("options", mode="before")
    @classmethod
    def _parse_options(cls, value: Any) -> EventOptions:
        if isinstance(value, EventOptions):
            return value
        return EventOptions.parse(value)

class EventCreate(BaseModel):
    """Payload for creating an event"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(serialization_alias="eventName")
    description: Optional[str] = None
    options: EventOptions = Field(default_factory=EventOptions)

    @field_serializer("options")
    def _serialize_options(self, options: EventOptions) -> str:
        return options.to_json()

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)

class EventUpdate(EventCreate):
    """Full-overwrite update payload; every mutable field must be supplied"""

    @classmethod
    def from_event(cls, event: Event) -> "EventUpdate":
        return cls(name=event.name, description=event.description, options=event.options)
