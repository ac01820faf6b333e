"""
Login/logout against the backend
"""

import logging
import re
from typing import Any, Optional

from checkin_console.core.errors import DecodeError
from checkin_console.schemas.auth import LoginRequest, LoginResult
from checkin_console.schemas.user import User
from checkin_console.services.resources import ResourceApi, decode_record

logger = logging.getLogger(__name__)

BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


def extract_token(body: Any) -> Optional[str]:
    """Find the access token in any of the login response shapes seen so far"""
    token = None
    if isinstance(body, str):
        token = body
    elif isinstance(body, dict):
        data = body.get("Data") or body.get("data")
        if isinstance(data, dict):
            token = data.get("AccessToken") or data.get("access_token") or data.get("token")
        if not token:
            token = body.get("AccessToken") or body.get("access_token") or body.get("token")
    if not isinstance(token, str) or not token.strip():
        return None
    return BEARER_PREFIX.sub("", token.strip())


def extract_user(body: Any) -> Optional[User]:
    if not isinstance(body, dict):
        return None
    data = body.get("Data") or body.get("data")
    for container in (data, body):
        if not isinstance(container, dict):
            continue
        raw = container.get("User") or container.get("user")
        if isinstance(raw, dict):
            return decode_record(User, raw)
    return None


class AuthApi(ResourceApi):
    """``login``; stores the token in the client's session"""

    async def login(self, username: str, password: str) -> LoginResult:
        request = LoginRequest(username=username, password=password)
        body = await self.client.post("login", json=request.model_dump())

        token = extract_token(body)
        if not token:
            logger.error("Login succeeded but no token was found in the response")
            raise DecodeError("Login succeeded but token not found in response", payload=body)

        result = LoginResult(token=token, user=extract_user(body))
        self.client.session.set_token(token)
        logger.info(f"Logged in as {username}")
        return result

    def logout(self) -> None:
        self.client.session.clear()
