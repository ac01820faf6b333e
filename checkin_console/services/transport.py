"""
HTTP transport to the backend API
"""

import logging
from typing import Any, Dict, Optional

import httpx

from checkin_console.core.config import settings
from checkin_console.core.errors import (
    DecodeError,
    RequestError,
    RequestTimeoutError,
    TransportError,
    error_for_status,
)
from checkin_console.core.session import SessionContext

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


def extract_error_message(response: httpx.Response) -> str:
    """Pull the backend's message out of an error response"""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("Message", "message", "error", "Error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or response.reason_phrase


class ApiClient:
    """Single configured client for every outgoing request"""

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        project_id: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.project_id = project_id or settings.API_PROJECT_ID
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            headers=DEFAULT_HEADERS,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
            event_hooks={"request": [self._inject_auth]},
            transport=transport,
        )

    async def _inject_auth(self, request: httpx.Request) -> None:
        token = self.session.token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    def project_path(self, *parts: Any) -> str:
        """Path under the project prefix, e.g. ``1/events/5/guests``"""
        return "/".join([str(self.project_id), *(str(part) for part in parts)])

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (``None`` if empty)"""
        logger.debug(f"{method} {path} params={params}")
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out: {e}")
            raise RequestTimeoutError("Request timed out") from e
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed to reach server: {e}")
            raise TransportError(f"Failed to reach server: {e}") from e
        except httpx.DecodingError as e:
            logger.warning(f"{method} {path} returned an undecodable body: {e}")
            raise DecodeError(f"Malformed response: {e}") from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(f"Request failed: {e}") from e

        if response.is_error:
            message = extract_error_message(response)
            logger.warning(f"{method} {path} - Status: {response.status_code} - {message}")
            raise error_for_status(response.status_code, message, response.text)

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError("Malformed response: body is not JSON", response.status_code) from e

        # Some endpoints answer 200 with an error envelope
        if isinstance(body, dict) and (body.get("Error") is True or body.get("error") is True):
            message = body.get("Message") or body.get("message") or "Request rejected"
            logger.warning(f"{method} {path} - error envelope: {message}")
            raise RequestError(str(message), response.status_code, body)
        return body

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()
