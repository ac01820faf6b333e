"""
Event Check-in Console - FastAPI application
Main application entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from checkin_console.core.config import settings
from checkin_console.core.errors import ApiError, ConsoleError
from checkin_console.services.console import Console
from checkin_console.api import routes_admin, routes_auth, routes_checkin
from checkin_console.utils.responses import api_error_response, console_error_response

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

def create_app(console_factory: Optional[Callable[[], Console]] = None) -> FastAPI:
    """Build the console app; ``console_factory`` lets tests swap the backend"""
    factory = console_factory or Console

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        app.state.console = factory()
        logger.info(f"Console started against {settings.API_BASE_URL}")
        yield
        await app.state.console.aclose()
        logger.info("Application shutdown")

    app = FastAPI(
        title="Event Check-in Console",
        description="Admin console for events, guests, room assignment and QR check-in",
        version="1.0.0",
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
        return api_error_response(exc)

    @app.exception_handler(ConsoleError)
    async def handle_console_error(request: Request, exc: ConsoleError):
        return console_error_response(exc)

    # Include routers
    app.include_router(routes_auth.router, prefix="/auth", tags=["auth"])
    app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])
    app.include_router(routes_checkin.router, prefix="/checkin", tags=["checkin"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app

app = create_app()

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
