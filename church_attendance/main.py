"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from church_attendance.api.deps import get_db
from church_attendance.api.v1.router import api_router
from church_attendance.core.config import settings
from church_attendance.core.exceptions import AppError
from church_attendance.core.logging_config import get_logger, setup_logging
from church_attendance.core.rate_limit import limiter
from church_attendance.db import close_database, init_database
from church_attendance.middleware import LoggingMiddleware

# Initialize structured logging
setup_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
logger = get_logger(__name__)

# Validate production configuration after logging is configured
if settings.ENVIRONMENT == "production":
    settings.validate_production_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store handle at startup and dispose it at shutdown."""
    logger.info(
        "application_starting",
        app_title=settings.APP_TITLE,
        app_version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )
    app.state.database = init_database(settings)
    try:
        yield
    finally:
        close_database(app.state.database)
        app.state.database = None


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("app_error", error=exc.message, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _validation_message(error: dict) -> str:
    field = str(error["loc"][-1]) if error.get("loc") else "body"
    if error.get("type") == "missing":
        return f"Missing required field: {field}"
    message = error.get("msg", "Invalid request")
    # Messages raised from our validators come prefixed by pydantic
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    return f"Invalid {field}: {message}"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = _validation_message(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database_error", exception=str(exc), exception_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": "Database error", "details": str(exc)})


def create_app() -> FastAPI:
    """Build the application with its middleware, handlers and routes."""
    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # Add rate limiter to app state
    app.state.limiter = limiter
    app.state.database = None

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Add logging middleware (must be added before other middleware for proper request tracking)
    app.add_middleware(LoggingMiddleware)

    @app.middleware("http")
    async def add_api_version_header(request: Request, call_next):
        """Add X-API-Version header to all responses for version tracking."""
        response = await call_next(request)
        response.headers["X-API-Version"] = settings.APP_VERSION
        return response

    # CORS middleware - configured for cookie-based auth
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/health")
    async def health_check(db: Session = Depends(get_db)):
        """
        Health check endpoint.

        Returns 503 when the database is not configured or unreachable.
        """
        health_status = {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": settings.APP_VERSION,
            "database": {"status": "connected", "dialect": db.get_bind().dialect.name},
        }

        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("health_check_failed", error=str(e))
            health_status["status"] = "unhealthy"
            health_status["database"]["status"] = "error"
            return JSONResponse(status_code=503, content=health_status)

        return health_status

    return app


app = create_app()
