"""
User-related Pydantic schemas
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .common import WireModel

class UserRole(str, Enum):
    SYSTEM_ADMIN = "SYSTEM_ADMIN"
    PROJECT_USER = "PROJECT_USER"

class User(WireModel):
    """Staff account as returned by the backend"""
    id: int = Field(validation_alias=AliasChoices("ID", "id", "userID", "UserID"))
    username: str = Field(validation_alias=AliasChoices("Username", "username", "UserName"))
    role: UserRole = Field(
        default=UserRole.PROJECT_USER, validation_alias=AliasChoices("Role", "role")
    )
    name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("Name", "name", "DisplayName", "displayName")
    )
    email: Optional[str] = Field(default=None, validation_alias=AliasChoices("Email", "email"))
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("CreatedAt", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("UpdatedAt", "updatedAt")
    )

class UserCreate(BaseModel):
    """Payload for creating a user"""

    model_config = ConfigDict(use_enum_values=True)

    username: str
    password: str
    role: UserRole = UserRole.PROJECT_USER
    name: Optional[str] = None
    email: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)

class UserUpdate(BaseModel):
    """Full-overwrite update payload; password is only sent when changing it"""

    model_config = ConfigDict(use_enum_values=True)

    username: str
    role: UserRole
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    def to_wire(self) -> dict:
        payload = self.model_dump()
        if payload.get("password") is None:
            payload.pop("password")
        return payload
