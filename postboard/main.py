"""
Postboard API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import engine, Base
from .limiter import limiter
from .logging_config import api_logger
from .middleware import RequestContextMiddleware, SecurityHeadersMiddleware, RequestLoggingMiddleware
from .responses import (
    api_exception_handler,
    rate_limit_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from .routes import auth_router, users_router, posts_router

VERSION = "1.0.0"

settings = get_settings()

# Create tables (documents live in JSON columns, so there is no migration step)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    api_logger.info(
        "Starting Postboard API",
        environment=settings.environment,
        upload_dir=settings.upload_dir,
    )
    yield
    api_logger.info("Stopped Postboard API")


app = FastAPI(
    title=settings.app_name,
    description="Blog API: accounts, posts, comments, likes and image uploads",
    version=VERSION,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Error bodies
app.add_exception_handler(StarletteHTTPException, api_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
        "x-auth-token",
    ],
    max_age=3600,
    expose_headers=["X-Request-ID"],
)

# Outermost, so every log line of a request carries its id
app.add_middleware(RequestContextMiddleware)

# Routes
app.include_router(users_router)
app.include_router(auth_router)
app.include_router(posts_router)

# Uploaded images are public
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(settings.upload_url_prefix, StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/api/health")
def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": VERSION,
    }


@app.get("/")
def root():
    return {
        "message": "API Running",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
