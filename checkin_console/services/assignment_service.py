"""
Hotel/room assignment and per-event summaries
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

from checkin_console.core.errors import AssignmentError, EventNotFoundError, GuestNotFoundError
from checkin_console.schemas.common import ListQueryParams
from checkin_console.schemas.event import Event
from checkin_console.schemas.guest import AssignmentRequest, Guest, GuestUpdate
from checkin_console.schemas.status import GuestStatus
from checkin_console.services.queries import ConsoleQueries, query_keys

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


async def list_all_events(queries: ConsoleQueries) -> List[Event]:
    events: List[Event] = []
    page = 1
    while True:
        response = await queries.events(ListQueryParams(page=page, limit=PAGE_SIZE))
        events.extend(response.items)
        if not response.items or not response.has_next_page:
            return events
        page += 1


async def list_all_guests(queries: ConsoleQueries, event_id: int) -> List[Guest]:
    """Every guest of an event, walking the backend's pages"""
    guests: List[Guest] = []
    page = 1
    while True:
        response = await queries.guests(event_id, ListQueryParams(page=page, limit=PAGE_SIZE, sort="name", dir="asc"))
        guests.extend(response.items)
        if not response.items or not response.has_next_page:
            return guests
        page += 1


async def find_event(queries: ConsoleQueries, event_id: int) -> Event:
    for event in await list_all_events(queries):
        if event.id == event_id:
            return event
    raise EventNotFoundError(f"Event not found with ID: {event_id}")


async def find_guest(queries: ConsoleQueries, event_id: int, guest_id: int, fresh: bool = False) -> Guest:
    """Look a guest up in the event's list.

    ``fresh`` drops cached pages first, so full-overwrite updates start from
    the backend's current record.
    """
    if fresh:
        queries.client.invalidate_queries(query_keys.guest_lists(event_id))
    for guest in await list_all_guests(queries, event_id):
        if guest.id == guest_id:
            return guest
    raise GuestNotFoundError(f"Guest not found with ID: {guest_id}")


class AssignmentService:
    """Service for hotel/room assignment operations"""

    def __init__(self, queries: ConsoleQueries):
        self.queries = queries

    @staticmethod
    def validate_assignment(event: Event, request: AssignmentRequest) -> List[str]:
        """Check the requested hotel and room against the event's options"""
        errors = []
        hotels = event.options.hotels
        rooms = event.options.rooms

        if request.hotel and hotels and request.hotel not in hotels:
            errors.append(f"Hotel '{request.hotel}' is not offered by event '{event.name}'")
        if request.room and rooms and request.room not in rooms:
            errors.append(f"Room '{request.room}' is not offered by event '{event.name}'")

        return errors

    async def assign(self, event_id: int, guest_id: int, request: AssignmentRequest) -> Guest:
        """Set a guest's hotel and room; dates are only touched when given"""
        event = await find_event(self.queries, event_id)
        guest = await find_guest(self.queries, event_id, guest_id, fresh=True)

        errors = self.validate_assignment(event, request)
        if errors:
            raise AssignmentError("; ".join(errors))

        custom_data = guest.custom_data.model_copy(deep=True)
        custom_data.hotel = request.hotel or None
        custom_data.room = request.room or None
        if request.check_in_date is not None:
            custom_data.check_in_date = request.check_in_date or None
        if request.check_out_date is not None:
            custom_data.check_out_date = request.check_out_date or None

        payload = GuestUpdate.from_guest(guest, event_id=event_id)
        payload.custom_data = custom_data
        updated = await self.queries.update_guest(event_id, guest_id, payload)

        logger.info(f"Assigned guest {guest_id} to hotel={custom_data.hotel} room={custom_data.room}")
        return updated or guest.model_copy(update={"custom_data": custom_data})

    async def guests_with_status(self, event_id: int, status: Optional[GuestStatus] = None) -> List[Guest]:
        guests = await list_all_guests(self.queries, event_id)
        if status is None:
            return guests
        return [guest for guest in guests if guest.status == status]

    @staticmethod
    def summarize(guests: List[Guest]) -> Dict:
        """Counts per derived status, plus per-hotel occupancy"""
        statuses = Counter(guest.status for guest in guests)

        hotels: Dict[str, Dict] = {}
        for guest in guests:
            hotel = guest.custom_data.hotel
            if not hotel:
                continue
            info = hotels.setdefault(hotel, {"hotel": hotel, "total_guests": 0, "checked_in": 0, "rooms": set()})
            info["total_guests"] += 1
            if guest.status == GuestStatus.CHECKED_IN:
                info["checked_in"] += 1
            if guest.custom_data.room:
                info["rooms"].add(guest.custom_data.room)

        return {
            "total_guests": len(guests),
            "assigned_guests": sum(1 for guest in guests if guest.custom_data.is_assigned),
            "checked_in_guests": statuses[GuestStatus.CHECKED_IN],
            "checked_out_guests": statuses[GuestStatus.CHECKED_OUT],
            "status_counts": {status.value: statuses[status] for status in GuestStatus},
            "hotels": [
                {**info, "rooms": sorted(info["rooms"])}
                for info in sorted(hotels.values(), key=lambda h: h["hotel"])
            ],
        }

    async def get_summary(self, event_id: int) -> Dict:
        event = await find_event(self.queries, event_id)
        guests = await list_all_guests(self.queries, event_id)
        summary = self.summarize(guests)
        return {"event_id": event.id, "event_name": event.name, **summary}
