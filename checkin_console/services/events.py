"""
Event resource operations
"""

import logging
from typing import Optional

from checkin_console.schemas.common import ListQueryParams, ListResponse
from checkin_console.schemas.event import Event, EventCreate, EventUpdate
from checkin_console.services.resources import ResourceApi, decode_list

logger = logging.getLogger(__name__)


class EventApi(ResourceApi):
    """``{project}/events``"""

    def _path(self, event_id: Optional[int] = None) -> str:
        if event_id is None:
            return self.client.project_path("events")
        return self.client.project_path("events", event_id)

    async def list(self, params: Optional[ListQueryParams] = None) -> ListResponse[Event]:
        params = params or ListQueryParams()
        body = await self.client.get(self._path(), params=params.to_query())
        return decode_list(Event, body)

    async def create(self, payload: EventCreate) -> Event:
        body = await self.client.post(self._path(), json=payload.to_wire())
        event = self._created(Event, body)
        logger.info(f"Created event {event.id} ({event.name})")
        return event

    async def update(self, event_id: int, payload: EventUpdate) -> Optional[Event]:
        body = await self.client.put(self._path(event_id), json=payload.to_wire())
        return self._maybe_record(Event, body)

    async def delete(self, event_id: int) -> None:
        await self.client.delete(self._path(event_id))
        logger.info(f"Deleted event {event_id}")
