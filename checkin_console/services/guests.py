"""
Guest resource operations
"""

import logging
from typing import Optional

from checkin_console.schemas.common import ListQueryParams, ListResponse
from checkin_console.schemas.guest import Guest, GuestCreate, GuestUpdate
from checkin_console.services.resources import ResourceApi, decode_list

logger = logging.getLogger(__name__)


class GuestApi(ResourceApi):
    """``{project}/events/{event_id}/guests`` plus the check-in endpoint"""

    def _path(self, event_id: int, guest_id: Optional[int] = None) -> str:
        if guest_id is None:
            return self.client.project_path("events", event_id, "guests")
        return self.client.project_path("events", event_id, "guests", guest_id)

    async def list(self, event_id: int, params: Optional[ListQueryParams] = None) -> ListResponse[Guest]:
        params = params or ListQueryParams()
        body = await self.client.get(self._path(event_id), params=params.to_query())
        return decode_list(Guest, body)

    async def create(self, event_id: int, payload: GuestCreate) -> Guest:
        if payload.event_id != event_id:
            payload = payload.model_copy(update={"event_id": event_id})
        body = await self.client.post(self._path(event_id), json=payload.to_wire())
        guest = self._created(Guest, body)
        logger.info(f"Created guest {guest.id} in event {event_id}")
        return guest

    async def update(self, event_id: int, guest_id: int, payload: GuestUpdate) -> Optional[Guest]:
        body = await self.client.put(self._path(event_id, guest_id), json=payload.to_wire())
        return self._maybe_record(Guest, body)

    async def delete(self, event_id: int, guest_id: int) -> None:
        await self.client.delete(self._path(event_id, guest_id))
        logger.info(f"Deleted guest {guest_id} from event {event_id}")

    async def checkin(self, guest_id: int) -> Optional[Guest]:
        """Record a check-in server-side"""
        body = await self.client.post(self.client.project_path("guests", "checkin", guest_id))
        logger.info(f"Checked in guest {guest_id}")
        return self._maybe_record(Guest, body)
