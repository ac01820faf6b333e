"""
Guest check-in and check-out
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from checkin_console.core.errors import AlreadyCheckedOutError, NotCheckedInError
from checkin_console.schemas.guest import Guest, GuestUpdate
from checkin_console.schemas.status import GuestStatus
from checkin_console.services.assignment_service import find_guest
from checkin_console.services.qr_service import QRService
from checkin_console.services.queries import ConsoleQueries

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2025-01-15T09:30:00.000Z``"""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class CheckInService:
    """Service for handling guest check-ins and check-outs"""

    def __init__(self, queries: ConsoleQueries, now: Callable[[], datetime] = _utcnow):
        self.queries = queries
        self.now = now

    async def check_in(self, guest_id: int) -> Optional[Guest]:
        """Record a check-in on the backend"""
        guest = await self.queries.checkin_guest(guest_id)
        logger.info(f"Guest {guest_id} checked in")
        return guest

    async def check_in_scan(self, payload: str) -> Dict:
        """Check in the guest identified by scanned QR text"""
        guest_id = QRService.parse_payload(payload)
        guest = await self.check_in(guest_id)
        return {"guest_id": guest_id, "guest": guest}

    async def check_out(self, event_id: int, guest_id: int) -> Guest:
        """Stamp ``CheckedOutAt`` on a checked-in guest"""
        guest = await find_guest(self.queries, event_id, guest_id, fresh=True)

        status = guest.status
        if status == GuestStatus.CHECKED_OUT:
            raise AlreadyCheckedOutError(f"Guest {guest.name} has already checked out")
        if status != GuestStatus.CHECKED_IN:
            raise NotCheckedInError(f"Guest {guest.name} has not checked in yet")

        custom_data = guest.custom_data.model_copy(deep=True)
        custom_data.checked_out_at = format_timestamp(self.now())

        payload = GuestUpdate.from_guest(guest, event_id=event_id)
        payload.custom_data = custom_data
        updated = await self.queries.update_guest(event_id, guest_id, payload)

        logger.info(f"Guest {guest_id} checked out")
        return updated or guest.model_copy(update={"custom_data": custom_data})

    async def check_out_scan(self, event_id: int, payload: str) -> Guest:
        return await self.check_out(event_id, QRService.parse_payload(payload))
