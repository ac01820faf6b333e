"""
Admin API routes - events, guests, assignments and users
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response

from checkin_console.core.config import settings
from checkin_console.schemas.common import ListQueryParams
from checkin_console.schemas.event import EventCreate, EventUpdate
from checkin_console.schemas.guest import AssignmentRequest, GuestForm
from checkin_console.schemas.status import GuestStatus
from checkin_console.schemas.user import UserCreate, UserUpdate
from checkin_console.services.assignment_service import AssignmentService, find_event, list_all_guests
from checkin_console.services.excel_service import ExcelService, XLSX_MEDIA_TYPE
from checkin_console.services.queries import ConsoleQueries
from checkin_console.api.deps import get_assignment_service, get_queries
from checkin_console.utils.responses import error_response, event_view, guest_view, success_response

router = APIRouter()

def list_params(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=500),
    sort: Optional[str] = Query(None),
    dir: Optional[str] = Query(None, pattern="^(asc|desc)$"),
    query: Optional[str] = Query(None),
) -> ListQueryParams:
    return ListQueryParams(page=page, limit=limit, sort=sort, dir=dir, query=query)

def _pagination(response) -> Optional[dict]:
    return response.pagination.model_dump() if response.pagination else None

# -------- Events --------

@router.get("/events")
async def list_events(
    params: ListQueryParams = Depends(list_params),
    queries: ConsoleQueries = Depends(get_queries)
):
    """List events"""
    response = await queries.events(params)
    return success_response(
        message="Events retrieved successfully",
        data={
            "events": [event_view(event) for event in response.items],
            "pagination": _pagination(response)
        }
    )

@router.post("/events")
async def create_event(
    event_data: EventCreate,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Create a new event"""
    event = await queries.create_event(event_data)
    return success_response(
        message="Event created successfully",
        data=event_view(event),
        status_code=201
    )

@router.put("/events/{event_id}")
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Overwrite an event; all fields must be supplied"""
    event = await queries.update_event(event_id, event_data)
    return success_response(
        message="Event updated successfully",
        data=event_view(event) if event else None
    )

@router.delete("/events/{event_id}")
async def delete_event(
    event_id: int,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Delete an event"""
    await queries.delete_event(event_id)
    return success_response(message="Event deleted successfully")

@router.get("/events/{event_id}/summary")
async def event_summary(
    event_id: int,
    assignments: AssignmentService = Depends(get_assignment_service)
):
    """Guest counts per status and per hotel"""
    summary = await assignments.get_summary(event_id)
    return success_response(message="Event summary retrieved", data=summary)

# -------- Guests --------

@router.get("/events/{event_id}/guests")
async def list_guests(
    event_id: int,
    status: Optional[GuestStatus] = Query(None),
    params: ListQueryParams = Depends(list_params),
    queries: ConsoleQueries = Depends(get_queries),
    assignments: AssignmentService = Depends(get_assignment_service)
):
    """List guests of an event, optionally only those with a given status"""
    if status is not None:
        guests = await assignments.guests_with_status(event_id, status)
        pagination = None
    else:
        response = await queries.guests(event_id, params)
        guests = response.items
        pagination = _pagination(response)

    return success_response(
        message="Guests retrieved successfully",
        data={
            "guests": [guest_view(guest) for guest in guests],
            "pagination": pagination
        }
    )

@router.post("/events/{event_id}/guests")
async def create_guest(
    event_id: int,
    guest_data: GuestForm,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Add a guest to an event"""
    guest = await queries.create_guest(event_id, guest_data.to_create(event_id))
    return success_response(
        message="Guest created successfully",
        data=guest_view(guest),
        status_code=201
    )

@router.put("/events/{event_id}/guests/{guest_id}")
async def update_guest(
    event_id: int,
    guest_id: int,
    guest_data: GuestForm,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Overwrite a guest; custom data must be complete, not a patch"""
    guest = await queries.update_guest(event_id, guest_id, guest_data.to_update(event_id))
    return success_response(
        message="Guest updated successfully",
        data=guest_view(guest) if guest else None
    )

@router.delete("/events/{event_id}/guests/{guest_id}")
async def delete_guest(
    event_id: int,
    guest_id: int,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Remove a guest"""
    await queries.delete_guest(event_id, guest_id)
    return success_response(message="Guest removed successfully")

@router.put("/events/{event_id}/guests/{guest_id}/assignment")
async def assign_guest(
    event_id: int,
    guest_id: int,
    assignment: AssignmentRequest,
    assignments: AssignmentService = Depends(get_assignment_service)
):
    """Assign a hotel and room to a guest"""
    guest = await assignments.assign(event_id, guest_id, assignment)
    return success_response(message="Assignment saved", data=guest_view(guest))

# -------- Excel --------

@router.get("/guests/template.xlsx")
async def download_template():
    """Empty guest list workbook with sample rows"""
    return Response(
        content=ExcelService.create_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=guest_template.xlsx"}
    )

@router.post("/events/{event_id}/guests/import")
async def import_guests(
    event_id: int,
    file: UploadFile = File(...),
    queries: ConsoleQueries = Depends(get_queries)
):
    """Upload and import an Excel guest list"""
    if not file.filename or not file.filename.lower().endswith('.xlsx'):
        return error_response(
            message="Invalid file format. Please upload an Excel workbook (.xlsx)",
            status_code=400
        )

    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        return error_response(message="File too large", status_code=413)

    event = await find_event(queries, event_id)
    success, errors, processed_count = await ExcelService.import_guests(queries, event, file_content)

    if not success:
        return error_response(
            message="Excel import failed",
            details={"errors": errors, "processed_count": processed_count},
            status_code=422
        )

    return success_response(
        message=f"Excel file processed successfully. {processed_count} guests imported.",
        data={
            "processed_count": processed_count,
            "filename": file.filename
        }
    )

@router.get("/events/{event_id}/guests/export.xlsx")
async def export_guests(
    event_id: int,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Export the event's guests with their current status"""
    event = await find_event(queries, event_id)
    guests = await list_all_guests(queries, event_id)

    return Response(
        content=ExcelService.export_guests(guests, include_checkin=True),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=guests_{event.id}.xlsx"}
    )

# -------- Users --------

@router.get("/users")
async def list_users(
    params: ListQueryParams = Depends(list_params),
    queries: ConsoleQueries = Depends(get_queries)
):
    """List staff accounts"""
    response = await queries.users(params)
    return success_response(
        message="Users retrieved successfully",
        data={
            "users": [user.model_dump(mode="json") for user in response.items],
            "pagination": _pagination(response)
        }
    )

@router.post("/users")
async def create_user(
    user_data: UserCreate,
    queries: ConsoleQueries = Depends(get_queries)
):
    user = await queries.create_user(user_data)
    return success_response(
        message="User created successfully",
        data=user.model_dump(mode="json"),
        status_code=201
    )

@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    queries: ConsoleQueries = Depends(get_queries)
):
    user = await queries.update_user(user_id, user_data)
    return success_response(
        message="User updated successfully",
        data=user.model_dump(mode="json") if user else None
    )

@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    queries: ConsoleQueries = Depends(get_queries)
):
    await queries.delete_user(user_id)
    return success_response(message="User deleted successfully")
