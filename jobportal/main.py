"""
JobPortal - Main Application

FastAPI backend with:
- Relational store through SQLAlchemy Core (PostgreSQL in production)
- JWT authentication and role gates
- Transactional email through Resend
- Rule-based career tools (resume + mock interview scoring)

Run: uvicorn jobportal.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from jobportal import __version__
from jobportal.api.routes import api_router
from jobportal.core.config import get_settings
from jobportal.core.exceptions import APIError, DependencyError, ValidationError
from jobportal.db.postgres import Database

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def error_response(error: APIError) -> JSONResponse:
    body = {"success": False, "message": error.message}
    if error.errors:
        body["errors"] = error.errors
    return JSONResponse(status_code=error.status_code, content=body)


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/query validation failures use the same 400 envelope as ValidationError."""
    # loc is ("body" | "query" | "path", field, ...)
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return error_response(ValidationError("Validation failed", errors=errors))


async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(DependencyError())


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(DependencyError())


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API.

    When a Database is passed in it is used as-is (schema and disposal are
    the caller's business); otherwise one is built from settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        if owned:
            app.state.db = Database.from_settings(settings)
            app.state.db.init_schema()
        logger.info("JobPortal API started")

        yield

        if owned:
            app.state.db.dispose()
        logger.info("JobPortal API stopped")

    app = FastAPI(
        title="JobPortal",
        description="""
        Job board backend.

        ## Features
        - **Authentication**: JWT login, registration, password reset
        - **Jobs**: Search, post, and manage job listings
        - **Applications**: Apply, withdraw, and review applicants
        - **Alumni Chapters**: Membership requests and chapter posts
        - **Career Tools**: Resume scoring, mock interviews, confidence pulse
        - **Admin**: Moderation of users, jobs and chapters
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if database is not None:
        app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(SQLAlchemyError, handle_store_error)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Store connectivity."""
        connected = request.app.state.db.ping()
        return {
            "status": "healthy" if connected else "degraded",
            "database": "connected" if connected else "disconnected",
        }

    return app


app = create_app()
