"""FastAPI application for the content planner.

Every error response has the body ``{"error": <message>}``:
- PlannerError subclasses map to their own status code
- Request validation errors map to 400
- Datastore errors map to 500 and are logged, never returned raw
- Anything else maps to 500
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from planner.auth import IdentityProviderClient
from planner.clients.gemini import GeminiClient
from planner.config import get_identity_provider_key, get_identity_provider_url
from planner.database import dispose_engine
from planner.exceptions import PlannerError
from planner.routes import checklist, notes, settings, tasks, video_projects
from planner.utils.logging import configure_logging

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup/shutdown of outbound HTTP clients.

    Startup:
    - Configure structlog
    - Initialize IdentityProviderClient if IDENTITY_PROVIDER_URL is set
    - Initialize the shared GeminiClient

    Shutdown:
    - Close both clients' HTTP connections
    - Dispose of the database engine
    """
    configure_logging()

    identity_client = None
    identity_url = get_identity_provider_url()
    if identity_url:
        identity_client = IdentityProviderClient(identity_url, get_identity_provider_key())
    else:
        log.warning(
            "identity_provider_disabled",
            message="IDENTITY_PROVIDER_URL not set, every request will be rejected",
        )
    app.state.identity_client = identity_client
    app.state.gemini_client = GeminiClient()

    yield  # Application runs here

    if identity_client:
        await identity_client.close()
    await app.state.gemini_client.close()
    await dispose_engine()


async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    log.info("request_invalid", path=request.url.path, error=message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error(
        "database_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database operation failed"},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "unexpected_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Build the application with routers and error handlers registered."""
    application = FastAPI(
        title="Content Planner",
        description="Notes, tasks, video projects and production schedule for creators",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.add_exception_handler(PlannerError, planner_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_error_handler)
    application.add_exception_handler(SQLAlchemyError, database_error_handler)
    application.add_exception_handler(Exception, unexpected_error_handler)

    application.include_router(notes.router)
    application.include_router(tasks.router)
    # Checklist routes are nested under /video-projects/{id}
    application.include_router(checklist.router)
    application.include_router(video_projects.router)
    application.include_router(settings.router)

    @application.get("/health", status_code=status.HTTP_200_OK)
    async def health_check() -> JSONResponse:
        """Liveness probe for deployment validation."""
        return JSONResponse(content={"status": "healthy", "service": "content-planner"})

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Binding to 0.0.0.0 is intentional for container deployments
    uvicorn.run(
        "planner.main:app",
        host="0.0.0.0",  # noqa: S104
        port=8000,
        reload=True,
    )
