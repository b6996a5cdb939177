"""
Coach Builder API server.

create_app() reads settings at call time, so tests build a fresh app after
changing the environment. The module-level `app` is what uvicorn imports.

For local development:
    uvicorn coachbuilder.main:app --reload

For production:
    uvicorn coachbuilder.main:app --host 0.0.0.0 --workers 4
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import auth, health, workout_logs
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Runs on startup and shutdown. There are no pooled resources; each
    request opens its own store connection.
    """
    settings = get_settings()

    logger.info(
        "Coach Builder API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {"snowflake": settings.snowflake_mock_mode},
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Coach Builder API shutting down")


def create_app() -> FastAPI:
    """
    Build the app: CORS, the body size limit, routers and the catch-all
    error handler.
    """
    settings = get_settings()
    logging.getLogger("coachbuilder").setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Workout and meal plan records for fitness coaches.

        ## Authentication

        Send your access code in the `x-access-code` header. Coach codes can
        record plans; the admin code can list and delete all records.

        ## Workflow

        1. **Log in**: `POST /api/login` with `{"code": "..."}`
        2. **Record a plan**: `POST /api/workout-logs` (coach code)
        3. **Review commissions**: `GET /api/workout-logs` (admin code)
        4. **Reset**: `DELETE /api/workout-logs` (admin code)
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        """Reject declared bodies above max_request_bytes with 413."""
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.max_request_bytes:
            logger.warning(
                "Request body too large",
                extra={"path": request.url.path, "content_length": int(content_length)}
            )
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"detail": "Request body too large"},
            )
        return await call_next(request)

    # Include routers
    app.include_router(
        health.router,
        prefix="/api/health",
        tags=["Health"],
    )

    app.include_router(
        auth.router,
        prefix="/api",
        tags=["Auth"],
    )

    app.include_router(
        workout_logs.router,
        prefix="/api/workout-logs",
        tags=["Workout Logs"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Coach Builder API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/api/health",
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. We log the full
        error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "coachbuilder.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
