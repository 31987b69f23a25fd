"""
Main application entry point for the Newton API.

This module builds the FastAPI application: it opens the store on startup,
configures logging, CORS and the HSTS header, translates persistence errors
into HTTP responses and mounts every router under the ``/1`` prefix.

Modules:
- newton.database: Store handle and its dependency
- newton.auth: Sessions router and authentication helpers
- newton.users: Users router
- newton.bookmarks: Bookmarks router
- newton.contacts: Contacts router
- newton.locations: Locations router
- newton.core: Application settings
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from newton import bookmarks, contacts, locations, users
from newton.auth import router as sessions_router
from newton.core import get_settings
from newton.database import open_database
from newton.errors import NotFoundError, StorageError
from newton.logging_config import configure_logging

settings = get_settings()
logger = logging.getLogger("newton.main")

HSTS_HEADER = "max-age=15768000"


class HSTSMiddleware:
    """Add a Strict-Transport-Security header to every HTTP response."""

    def __init__(self, app: ASGIApp, value: str = HSTS_HEADER) -> None:
        self.app = app
        self.value = value

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_hsts(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)["Strict-Transport-Security"] = self.value
            await send(message)

        await self.app(scope, receive, send_with_hsts)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the store once for the whole process and close it on shutdown.

    Fails fast when ``DATABASE_URL`` is empty, unsupported or unreachable.
    """
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    app.state.db = open_database(settings.DATABASE_URL, settings)
    try:
        yield
    finally:
        app.state.db.close()


# Initialize FastAPI application
app = FastAPI(title="Newton API", lifespan=lifespan)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(HSTSMiddleware, value=HSTS_HEADER)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    """Log the failure with its origin and hide the details from the client."""
    logger.error(
        "%s",
        exc,
        extra={"site": exc.site, "method": request.method, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


# Include routers for application areas
v1 = APIRouter(prefix="/1")
v1.include_router(sessions_router)
v1.include_router(users.router)
v1.include_router(bookmarks.router)
v1.include_router(contacts.router)
v1.include_router(locations.router)
app.include_router(v1)


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Newton API. Visit /docs for Swagger UI"}
