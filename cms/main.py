"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cms.core.config import settings
from cms.core.database import AsyncSessionLocal, init_db, close_db
from cms.core.exceptions import ServiceException
from cms.core.logging import setup_logging, get_logger
from cms.core.middleware import LoggingMiddleware
from cms.services.site import SiteService
from cms.api.health import router as health_router
from cms.api.documents import router as documents_router
from cms.api.imports import router as imports_router

# Setup logging
setup_logging()
logger = get_logger(__name__)

ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_ARGUMENT": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_ERROR": status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    await logger.ainfo("Starting site content service")

    try:
        await init_db()
        async with AsyncSessionLocal() as session:
            await SiteService(session).ensure_default_site()
        await logger.ainfo("Application startup completed")
    except Exception as e:
        await logger.aerror("Failed to start application", error=str(e))
        raise

    yield

    await logger.ainfo("Shutting down site content service")
    await close_db()


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    """Map service errors onto HTTP responses."""
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    log = logger.aerror if status_code >= 500 else logger.awarning
    await log(
        "Service error",
        path=request.url.path,
        code=exc.code,
        error=exc.message,
        status_code=status_code
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-site document tree administration",
        version="1.0.0",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.DEBUG else ["http://localhost:8000", "http://127.0.0.1:8000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceException, service_exception_handler)

    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(documents_router, prefix="/api")
    app.include_router(imports_router, prefix="/api")

    return app


app = create_app()
