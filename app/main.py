"""
FastAPI application entry point.
Builds the application from injected settings and wires routers, middleware and error handlers.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from typing import Optional
import logging

from app.config import Settings, get_settings
from app.database import (
    create_engine_from_settings,
    create_session_factory,
    create_tables,
    check_database_connection
)
from app.routers import auth_router, properties_router
from app.utils.exceptions import APIException
from app.services.error_handler import ErrorHandlerService
from app.middleware.validation import ValidationMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the application.

    Args:
        settings: Application settings; loaded from the environment when omitted

    Raises:
        ConfigurationError: If required settings are missing
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Opens the database engine on startup and disposes it on shutdown.
        """
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Environment: {settings.environment}")

        engine = create_engine_from_settings(settings)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)

        if not await check_database_connection(app.state.session_factory):
            await engine.dispose()
            raise RuntimeError("Database is unreachable")
        await create_tables(engine)

        yield

        logger.info("Shutting down application")
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    REST backend for a real-estate listing marketplace.

    ## Features

    * **Accounts**: Signup and login for Buyers and Agents with role-based dashboards
    * **Listings**: Agents create listings with up to 10 images; owners and admins update them
    * **Search**: Filter by location, type, status, price range and rooms, with sorting and pagination

    ## Authentication

    Login or signup sets an http-only `jwt` cookie and also returns the token.
    Send it back as the cookie or as `Authorization: Bearer <token>`.
    """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "Authentication", "description": "Account registration and sessions"},
            {"name": "Properties", "description": "Property listing management and search"},
            {"name": "Health", "description": "Service health"}
        ],
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(
        ValidationMiddleware,
        # Room for a full image batch plus form fields
        max_request_size=settings.max_images_per_property * settings.max_image_size + 1024 * 1024,
        enable_request_logging=not settings.is_testing
    )

    # Include API routers
    app.include_router(auth_router, prefix=settings.api_v1_prefix)
    app.include_router(properties_router, prefix=settings.api_v1_prefix)

    register_exception_handlers(app)
    register_health_routes(app, settings)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Global exception handlers using ErrorHandlerService."""

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        """Handle custom API exceptions with structured error responses."""
        return ErrorHandlerService.handle_api_exception(exc, request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies and parameters."""
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle database errors with appropriate error responses."""
        return ErrorHandlerService.handle_database_error(exc, request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle framework HTTP exceptions with structured error responses."""
        return ErrorHandlerService.handle_http_exception(exc, request)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with secure error responses."""
        return ErrorHandlerService.handle_unexpected_error(exc, request)


def register_health_routes(app: FastAPI, settings: Settings) -> None:

    @app.get("/", tags=["Health"])
    async def root():
        """Basic API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment,
            "documentation": {
                "swagger_ui": "/docs",
                "redoc": "/redoc",
                "openapi_json": "/openapi.json"
            },
            "api_prefix": settings.api_v1_prefix
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check endpoint with database connectivity test.
        Used by container health checks and load balancers.
        """
        db_healthy = await check_database_connection(request.app.state.session_factory)
        if not db_healthy:
            raise StarletteHTTPException(status_code=503, detail="Database connection failed")

        return {
            "status": "healthy",
            "message": "Server is healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "database": "connected"
        }


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
