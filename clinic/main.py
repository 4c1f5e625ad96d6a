from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from typing import Optional
import time
import logging

from .api.v1.admin import router as admin_router
from .api.v1.auth import router as auth_router
from .api.v1.doctor import router as doctor_router
from .api.v1.patient import router as patient_router
from .core.config import Settings, settings as default_settings
from .core.database import (
    create_db_engine, create_redis_client, create_session_factory, init_db
)
from .core.exceptions import ClinicError

logger = logging.getLogger(__name__)

def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    redis_client=None
) -> FastAPI:
    """Build the application with explicitly constructed store handles."""
    settings = settings or default_settings

    # Configure logging
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Role-based appointment booking for a clinic",
        openapi_url="/api/v1/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(settings))
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.redis = redis_client if redis_client is not None else create_redis_client(settings)

    # Middleware setup
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Only add TrustedHostMiddleware in production, not in testing
    if not settings.TESTING:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.ALLOWED_HOSTS
        )

    # Request logging and timing
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response

    # Exception handlers
    @app.exception_handler(ClinicError)
    async def clinic_error_handler(request: Request, exc: ClinicError):
        logger.warning(f"{exc.kind} on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "detail": exc.detail},
            headers=exc.headers
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Internal server error: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": "An unexpected error occurred"
            }
        )

    # Include routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(patient_router, prefix="/api/v1")
    app.include_router(doctor_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event():
        """Create tables on startup."""
        logger.info(f"Starting {settings.APP_NAME}...")

        try:
            init_db(session_factory.kw["bind"])
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

        logger.info("Application startup complete")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {settings.APP_NAME}...")

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.VERSION
        }

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    @app.get("/api/v1/info")
    async def api_info():
        return {
            "name": settings.APP_NAME,
            "version": settings.VERSION,
            "endpoints": {
                "authentication": "/api/v1/auth",
                "patient": "/api/v1/patient",
                "doctor": "/api/v1/doctor",
                "admin": "/api/v1/admin",
                "openapi": "/api/v1/openapi.json"
            }
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
        log_level="info"
    )
