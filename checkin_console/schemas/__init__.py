"""
Pydantic schemas package
"""

from .common import *
from .options import *
from .status import *
from .event import *
from .guest import *
from .user import *
from .auth import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "Pagination",
    "ListQueryParams",
    "ListResponse",
    "parse_options",
    "stringify_options",
    "EventOptions",
    "GuestCustomData",
    "GuestStatus",
    "derive_guest_status",
    "Event",
    "EventCreate",
    "EventUpdate",
    "Guest",
    "GuestCreate",
    "GuestUpdate",
    "GuestForm",
    "AssignmentRequest",
    "ScanRequest",
    "User",
    "UserRole",
    "UserCreate",
    "UserUpdate",
    "LoginRequest",
    "LoginResult",
]
