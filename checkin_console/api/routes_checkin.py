"""
Check-in desk routes: scanning, check-in/out and guest QR codes
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from checkin_console.schemas.guest import ScanRequest
from checkin_console.services.checkin_service import CheckInService
from checkin_console.services.qr_service import QRService
from checkin_console.api.deps import get_checkin_service
from checkin_console.utils.responses import guest_view, success_response

router = APIRouter()

@router.post("/guests/{guest_id}")
async def check_in_guest(
    guest_id: int,
    checkin: CheckInService = Depends(get_checkin_service)
):
    """Check in a guest by id"""
    guest = await checkin.check_in(guest_id)
    return success_response(
        message="Check-in successful",
        data={"guest_id": guest_id, "guest": guest_view(guest) if guest else None}
    )

@router.post("/scan")
async def check_in_scan(
    scan: ScanRequest,
    checkin: CheckInService = Depends(get_checkin_service)
):
    """Check in the guest whose QR code was scanned"""
    result = await checkin.check_in_scan(scan.payload)
    guest = result["guest"]
    return success_response(
        message="QR code scanned, guest checked in",
        data={"guest_id": result["guest_id"], "guest": guest_view(guest) if guest else None}
    )

@router.post("/events/{event_id}/guests/{guest_id}/checkout")
async def check_out_guest(
    event_id: int,
    guest_id: int,
    checkin: CheckInService = Depends(get_checkin_service)
):
    """Check out a guest who has checked in"""
    guest = await checkin.check_out(event_id, guest_id)
    return success_response(
        message=f"Successfully checked out {guest.name}",
        data=guest_view(guest)
    )

@router.post("/events/{event_id}/checkout/scan")
async def check_out_scan(
    event_id: int,
    scan: ScanRequest,
    checkin: CheckInService = Depends(get_checkin_service)
):
    """Check out the guest whose QR code was scanned"""
    guest = await checkin.check_out_scan(event_id, scan.payload)
    return success_response(
        message=f"Successfully checked out {guest.name}",
        data=guest_view(guest)
    )

@router.get("/guests/{guest_id}/qr.png")
async def guest_qr(guest_id: int):
    """QR code the guest presents at the desk"""
    return Response(
        content=QRService.generate_guest_qr(guest_id),
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=guest_{guest_id}.png"}
    )
