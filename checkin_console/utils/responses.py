"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from checkin_console.core.errors import (
    ApiError,
    AuthenticationError,
    ConsoleError,
    RequestError,
    RequestTimeoutError,
)
from checkin_console.schemas.common import StandardResponse, ErrorResponse
from checkin_console.schemas.event import Event
from checkin_console.schemas.guest import Guest

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Create standardized success response"""
    response = StandardResponse(
        success=True,
        message=message,
        data=jsonable_encoder(data)
    )
    return JSONResponse(
        content=response.model_dump(),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=jsonable_encoder(details)
    )
    return JSONResponse(
        content=response.model_dump(),
        status_code=status_code
    )

def status_for_api_error(exc: ApiError) -> int:
    """HTTP status the console answers with when the backend call failed"""
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, RequestError):
        # Error envelopes arrive with a 2xx status
        if exc.status_code and exc.status_code >= 400:
            return exc.status_code
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, RequestTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY

def api_error_response(exc: ApiError) -> JSONResponse:
    return error_response(
        message=exc.message,
        error_code=type(exc).__name__,
        status_code=status_for_api_error(exc)
    )

def console_error_response(exc: ConsoleError) -> JSONResponse:
    return error_response(
        message=exc.message,
        error_code=type(exc).__name__,
        status_code=exc.status_code
    )

def event_view(event: Event) -> dict:
    """Event as the console API shows it, options under their wire keys"""
    data = event.model_dump(mode="json", exclude={"options"})
    data["options"] = event.options.to_dict()
    return data

def guest_view(guest: Guest) -> dict:
    """Guest as the console API shows it, with the derived status"""
    data = guest.model_dump(mode="json", exclude={"custom_data"})
    data["custom_data"] = guest.custom_data.to_dict()
    data["status"] = guest.status.value
    return data
