"""
Session routes: login/logout against the backend
"""

from fastapi import APIRouter, Depends

from checkin_console.schemas.auth import LoginRequest
from checkin_console.services.console import Console
from checkin_console.services.queries import ConsoleQueries
from checkin_console.api.deps import get_console, get_queries
from checkin_console.utils.responses import success_response

router = APIRouter()

@router.post("/login")
async def login(
    credentials: LoginRequest,
    queries: ConsoleQueries = Depends(get_queries)
):
    """Log in and keep the bearer token for subsequent backend calls"""
    result = await queries.login(credentials.username, credentials.password)
    return success_response(
        message="Logged in successfully",
        data={"user": result.user.model_dump(mode="json") if result.user else None}
    )

@router.post("/logout")
async def logout(queries: ConsoleQueries = Depends(get_queries)):
    """Forget the token and every cached result"""
    queries.logout()
    return success_response(message="Logged out")

@router.get("/session")
async def session_status(console: Console = Depends(get_console)):
    return success_response(
        message="Session status",
        data={"authenticated": console.session.is_authenticated}
    )
