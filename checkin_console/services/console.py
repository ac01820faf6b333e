"""
Wiring of session, transport, resource APIs and the query cache
"""

import logging
from typing import Optional

import httpx

from checkin_console.core.config import settings
from checkin_console.core.session import FileSessionStore, MemorySessionStore, SessionContext
from checkin_console.services.auth import AuthApi
from checkin_console.services.events import EventApi
from checkin_console.services.guests import GuestApi
from checkin_console.services.queries import ConsoleQueries
from checkin_console.services.query_client import QueryClient
from checkin_console.services.transport import ApiClient
from checkin_console.services.users import UserApi

logger = logging.getLogger(__name__)


def build_session() -> SessionContext:
    """Session backed by ``SESSION_FILE`` when set, seeded from ``AUTH_TOKEN``"""
    if settings.SESSION_FILE:
        store = FileSessionStore(settings.SESSION_FILE)
    else:
        store = MemorySessionStore()
    return SessionContext(store, static_token=settings.AUTH_TOKEN)


class Console:
    """Everything one console process needs to talk to the backend"""

    def __init__(
        self,
        session: Optional[SessionContext] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        query_client: Optional[QueryClient] = None,
        base_url: Optional[str] = None,
        project_id: Optional[str] = None,
    ):
        self.session = session or build_session()
        self.api = ApiClient(self.session, base_url=base_url, project_id=project_id, transport=transport)
        self.query_client = query_client or QueryClient()
        self.queries = ConsoleQueries(
            self.query_client,
            events=EventApi(self.api),
            guests=GuestApi(self.api),
            users=UserApi(self.api),
            auth=AuthApi(self.api),
        )
        logger.info(f"Console ready for project {self.api.project_id} at {base_url or settings.API_BASE_URL}")

    async def aclose(self) -> None:
        await self.api.aclose()
