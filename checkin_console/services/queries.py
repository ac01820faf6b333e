"""
Cached reads and invalidating mutations for every backend resource
"""

import logging
from typing import Optional

from checkin_console.schemas.common import ListQueryParams, ListResponse
from checkin_console.schemas.event import Event
from checkin_console.schemas.guest import Guest
from checkin_console.schemas.auth import LoginResult
from checkin_console.schemas.user import User
from checkin_console.services.auth import AuthApi
from checkin_console.services.events import EventApi
from checkin_console.services.guests import GuestApi
from checkin_console.services.query_client import Mutation, QueryClient, QueryKey, QueryObserver
from checkin_console.services.users import UserApi

logger = logging.getLogger(__name__)


def _params_key(params: Optional[ListQueryParams]) -> tuple:
    return params.cache_key() if params else ()


class query_keys:
    """Cache key factories: kind, then ``list``/``detail``, then parameters"""

    @staticmethod
    def events_all() -> QueryKey:
        return ("events",)

    @staticmethod
    def event_lists() -> QueryKey:
        return ("events", "list")

    @staticmethod
    def event_list(params: Optional[ListQueryParams] = None) -> QueryKey:
        return ("events", "list", _params_key(params))

    @staticmethod
    def event_detail(event_id: int) -> QueryKey:
        return ("events", "detail", event_id)

    @staticmethod
    def guest_lists(event_id: Optional[int] = None) -> QueryKey:
        if event_id is None:
            return ("guests", "list")
        return ("guests", "list", event_id)

    @staticmethod
    def guest_list(event_id: Optional[int], params: Optional[ListQueryParams] = None) -> QueryKey:
        return ("guests", "list", event_id, _params_key(params))

    @staticmethod
    def guest_detail(guest_id: int) -> QueryKey:
        return ("guests", "detail", guest_id)

    @staticmethod
    def user_lists() -> QueryKey:
        return ("users", "list")

    @staticmethod
    def user_list(params: Optional[ListQueryParams] = None) -> QueryKey:
        return ("users", "list", _params_key(params))

    @staticmethod
    def user_detail(user_id: int) -> QueryKey:
        return ("users", "detail", user_id)


class ConsoleQueries:
    """What the console's views and workflows read from and write through"""

    def __init__(
        self,
        client: QueryClient,
        events: EventApi,
        guests: GuestApi,
        users: UserApi,
        auth: AuthApi,
    ):
        self.client = client
        self.event_api = events
        self.guest_api = guests
        self.user_api = users
        self.auth_api = auth

        self.create_event = Mutation(client, events.create, self._after_event_created, name="create_event")
        self.update_event = Mutation(client, events.update, self._after_event_changed, name="update_event")
        self.delete_event = Mutation(client, events.delete, self._after_event_deleted, name="delete_event")

        self.create_guest = Mutation(client, guests.create, self._after_guest_created, name="create_guest")
        self.update_guest = Mutation(client, guests.update, self._after_guest_changed, name="update_guest")
        self.delete_guest = Mutation(client, guests.delete, self._after_guest_changed, name="delete_guest")
        self.checkin_guest = Mutation(client, guests.checkin, self._after_guest_checked_in, name="checkin_guest")

        self.create_user = Mutation(client, users.create, self._after_user_created, name="create_user")
        self.update_user = Mutation(client, users.update, self._after_user_changed, name="update_user")
        self.delete_user = Mutation(client, users.delete, self._after_user_changed, name="delete_user")

        self.login = Mutation(client, auth.login, self._after_login, name="login")

    # -------- reads --------

    async def events(self, params: Optional[ListQueryParams] = None) -> ListResponse[Event]:
        return await self.client.fetch_query(
            query_keys.event_list(params), lambda: self.event_api.list(params)
        )

    async def guests(self, event_id: int, params: Optional[ListQueryParams] = None) -> ListResponse[Guest]:
        return await self.client.fetch_query(
            query_keys.guest_list(event_id, params), lambda: self.guest_api.list(event_id, params)
        )

    async def users(self, params: Optional[ListQueryParams] = None) -> ListResponse[User]:
        return await self.client.fetch_query(
            query_keys.user_list(params), lambda: self.user_api.list(params)
        )

    def events_observer(self, params: Optional[ListQueryParams] = None) -> QueryObserver:
        return QueryObserver(self.client, query_keys.event_list, self.event_api.list, params)

    def guests_observer(self, event_id: Optional[int] = None, params: Optional[ListQueryParams] = None) -> QueryObserver:
        """Guests of the selected event; idle until an event is selected"""
        return QueryObserver(
            self.client, query_keys.guest_list, self.guest_api.list, event_id, params,
            enabled=lambda event_id, params=None: event_id is not None,
        )

    # -------- session --------

    def logout(self) -> None:
        """Drop the token and every cached result of this session"""
        self.auth_api.logout()
        self.client.clear()

    # -------- invalidation rules --------

    def _after_event_created(self, event: Event, *args, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.event_lists())

    def _after_event_changed(self, result, event_id: int, *args, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.event_lists())
        self.client.invalidate_queries(query_keys.event_detail(event_id))

    def _after_event_deleted(self, result, event_id: int, **kwargs) -> None:
        self._after_event_changed(result, event_id)
        self.client.invalidate_queries(query_keys.guest_lists(event_id))

    def _after_guest_created(self, guest: Guest, *args, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.guest_lists())

    def _after_guest_changed(self, result, event_id: int, guest_id: int, *args, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.guest_lists())
        self.client.invalidate_queries(query_keys.guest_detail(guest_id))

    def _after_guest_checked_in(self, result, guest_id: int, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.guest_lists())
        self.client.invalidate_queries(query_keys.guest_detail(guest_id))

    def _after_user_created(self, user: User, *args, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.user_lists())

    def _after_user_changed(self, result, user_id: int, *args, **kwargs) -> None:
        self.client.invalidate_queries(query_keys.user_lists())
        self.client.invalidate_queries(query_keys.user_detail(user_id))

    def _after_login(self, result: LoginResult, *args, **kwargs) -> None:
        # Everything cached so far was fetched with another identity
        self.client.invalidate_queries()
