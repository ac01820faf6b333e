"""
Authentication schemas
"""

from typing import Optional

from pydantic import BaseModel

from .user import User

class LoginRequest(BaseModel):
    username: str
    password: str

class LoginResult(BaseModel):
    """Bearer token plus the profile of the signed-in user, when sent"""
    token: str
    user: Optional[User] = None
