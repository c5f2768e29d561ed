"""
FastAPI application entry point.
Main application instance with middleware and route configuration.
"""
from fastapi import FastAPI, Request, status, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from pathlib import Path
import logging
import asyncio
import os

from gallery_cms.config import settings
from gallery_cms.database import get_db, init_db, close_db
from gallery_cms.errors import ServiceError
from gallery_cms.routes import auth, galleries, paintings, resume
from gallery_cms.utils.rate_limit import limiter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI application instance
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
)

# Rate limiting for the auth endpoints
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS Middleware Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,  # Cache preflight requests for 1 hour
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its response status."""
    method = request.method
    path = request.url.path

    try:
        response = await call_next(request)
        logger.info(f"Response status: {response.status_code} for {method} {path}")
        return response
    except Exception as e:
        logger.error(
            f"Error processing {method} {path}: {str(e)}\n"
            f"  Error type: {type(e).__name__}",
            exc_info=True
        )
        raise


# Include routers
app.include_router(galleries.router, prefix="/api")
app.include_router(paintings.router, prefix="/api")
app.include_router(resume.router, prefix="/api")
app.include_router(auth.router, prefix="/api")

# Uploaded originals and thumbnails: /galleries/{folder}/{originals|thumbnails}/{file}
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/galleries", StaticFiles(directory=settings.UPLOAD_DIR), name="galleries")


def add_cors_headers(response: JSONResponse, request: Request) -> JSONResponse:
    """
    Echo CORS headers on error responses, which bypass CORSMiddleware
    when raised from the exception handlers below.
    """
    origin = request.headers.get("origin")
    if origin and origin in settings.CORS_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"

    return response


def error_response(request: Request, status_code: int, error: str, detail, headers=None, **extra) -> JSONResponse:
    """Build the `{"error", "detail"}` body shared by every error response."""
    response = JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, **extra},
        headers=headers,
    )
    return add_cors_headers(response, request)


# Exception Handlers
@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Domain errors raised by the services (400, 401, 403, 404, 409)."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.status_code} {exc.message}")
    body = exc.to_dict()
    return error_response(request, exc.status_code, body.pop("error"), body.pop("detail"), **body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    HTTP errors from the auth dependencies, unknown routes and static files.
    The auth helpers raise with a `{"error", "message"}` dict as detail.
    """
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")

    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", "Error")
        detail = exc.detail.get("message", exc.detail.get("detail", ""))
    else:
        error = detail = str(exc.detail)

    return error_response(request, exc.status_code, error, detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies, forms and parameters are reported as 400."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return error_response(
        request, status.HTTP_400_BAD_REQUEST, "Validation error", jsonable_encoder(exc.errors())
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "An unexpected error occurred",
    )


# Root Endpoints
@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": settings.API_TITLE,
        "status": "healthy",
        "version": settings.API_VERSION
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    """
    Database health check endpoint.
    Tests database connection and returns status.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        return {
            "database": "connected",
            "status": "healthy",
            "result": result.scalar()
        }
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}", exc_info=True)
        return {
            "database": "error",
            "status": "unhealthy",
            "error": "Database connection failed"
        }


@app.get("/health/storage")
async def health_check_storage():
    """
    Image storage health check endpoint.
    Verifies the upload directory exists and is writable.
    """
    upload_dir = Path(settings.UPLOAD_DIR)
    if upload_dir.is_dir() and os.access(upload_dir, os.W_OK):
        return {
            "storage": "writable",
            "status": "healthy",
            "upload_dir": str(upload_dir)
        }

    logger.error(f"Upload directory {upload_dir} is missing or not writable")
    return {
        "storage": "error",
        "status": "unhealthy",
        "error": "Upload directory is missing or not writable"
    }


@app.on_event("startup")
async def startup_event():
    """
    Create tables and check the database connection on application startup.
    Non-blocking: app will start even if database connection fails.
    """
    logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")
    logger.info(f"Serving gallery images from {Path(settings.UPLOAD_DIR).resolve()}")

    try:
        await init_db()
        logger.info("Database connection established successfully")
    except Exception as e:
        logger.error(
            f"Failed to initialize database on startup: {str(e)}\n"
            f"The application will continue to run, but database-dependent endpoints will fail.\n"
            f"Please check your DATABASE_URL configuration."
        )
        # Don't raise - allow app to start without database for non-db endpoints


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on application shutdown."""
    try:
        await close_db()
    except Exception as e:
        # Ignore cancellation errors during shutdown - they're expected
        if not isinstance(e, (KeyboardInterrupt, asyncio.CancelledError)):
            logger.warning(f"Error during database shutdown: {str(e)}")
