"""
User resource operations
"""

from typing import Optional

from checkin_console.schemas.common import ListQueryParams, ListResponse
from checkin_console.schemas.user import User, UserCreate, UserUpdate
from checkin_console.services.resources import ResourceApi, decode_list


class UserApi(ResourceApi):
    """``users``; not scoped to a project"""

    async def list(self, params: Optional[ListQueryParams] = None) -> ListResponse[User]:
        params = params or ListQueryParams()
        body = await self.client.get("users", params=params.to_query())
        return decode_list(User, body)

    async def create(self, payload: UserCreate) -> User:
        body = await self.client.post("users", json=payload.to_wire())
        return self._created(User, body)

    async def update(self, user_id: int, payload: UserUpdate) -> Optional[User]:
        body = await self.client.put(f"users/{user_id}", json=payload.to_wire())
        return self._maybe_record(User, body)

    async def delete(self, user_id: int) -> None:
        await self.client.delete(f"users/{user_id}")
