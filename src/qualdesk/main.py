"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from qualdesk import __version__
from qualdesk.app_context import get_app_context
from qualdesk.config.settings import get_settings
from qualdesk.config.logging_config import setup_logging
from qualdesk.api.routers import qualifications_router, assistant_router, cache_router
from qualdesk.core.exceptions import AppError, NotFoundError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    context = get_app_context()
    if not context.is_initialized:
        await context.initialize()
    yield
    # Shutdown
    await context.close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Browse, filter, bulk-delete and export tax qualifications",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(qualifications_router)
app.include_router(assistant_router)
app.include_router(cache_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=404 if isinstance(exc, NotFoundError) else 400,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
