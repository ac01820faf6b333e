"""
Session context holding the bearer token for outgoing requests
"""

import json
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class SessionStore:
    """Storage slot for the session token"""

    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, token: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileSessionStore(SessionStore):
    """Keeps the token in a JSON file so it survives restarts"""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[str]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None
        if not isinstance(data, dict):
            return None
        return data.get("authToken") or None

    def save(self, token: str) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"authToken": token}, f)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)


class SessionContext:
    """Process-wide session, passed explicitly to whoever needs the token"""

    def __init__(self, store: Optional[SessionStore] = None, static_token: Optional[str] = None):
        self.store = store or MemorySessionStore()
        if static_token and not self.store.load():
            self.store.save(static_token)

    @property
    def token(self) -> Optional[str]:
        return self.store.load()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: str) -> None:
        self.store.save(token)
        logger.info("Session token stored")

    def clear(self) -> None:
        self.store.clear()
        logger.info("Session token cleared")
