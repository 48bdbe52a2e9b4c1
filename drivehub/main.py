"""
Main FastAPI application entry point
"""
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from drivehub.core.config import Settings, load_settings_or_exit
from drivehub.core.errors import DriveHubError
from drivehub.core.logging_config import logger, setup_logging
from drivehub.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from drivehub.db.session import create_db_engine, create_session_factory, init_db
from drivehub.routes import bookings
from drivehub.services.booking_service import BookingIntakeService
from drivehub.services.booking_store import BookingStore
from drivehub.services.file_intake import FileIntakeService
from drivehub.utils.storage import FileStorage


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application from a settings object"""
    if settings is None:
        settings = load_settings_or_exit()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="DriveHub - vehicle rental booking intake API",
        debug=settings.DEBUG
    )

    # Last added is outermost, so CORS and security headers also cover 429 responses
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware, max_requests=settings.RATE_LIMIT_PER_MINUTE, window_seconds=60)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Storage and uploaded documents
    storage = FileStorage(settings)
    upload_dir = storage.ensure_upload_dir()
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    # Database; a failure here is fatal
    engine = create_db_engine(settings)
    init_db(engine)

    file_intake = FileIntakeService(settings, storage)
    booking_store = BookingStore(max_list_size=settings.BOOKINGS_LIST_LIMIT)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.file_intake = file_intake
    app.state.booking_store = booking_store
    app.state.intake_service = BookingIntakeService(settings, file_intake, booking_store)

    register_exception_handlers(app)

    app.include_router(bookings.router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {"msg": f"{settings.APP_NAME} API running"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT
        }

    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} ready (environment={settings.ENVIRONMENT})")
    return app


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DriveHubError)
    async def drivehub_exception_handler(request: Request, exc: DriveHubError):
        """Map booking error kinds to status codes"""
        if exc.status_code >= 500:
            logger.error(f"{exc.kind.value} on {request.url.path}: {exc.message}")
        else:
            logger.info(f"{exc.kind.value} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.public_message}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        logger.error(f"HTTP exception: {exc.status_code} - {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors"""
        logger.error(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "Validation error", "details": jsonable_errors(exc)}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions"""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Server error"}
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


settings = load_settings_or_exit()

setup_logging(log_level="DEBUG" if settings.DEBUG else "INFO", log_file=settings.LOG_FILE)

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("drivehub.main:app", host="0.0.0.0", port=settings.PORT)
