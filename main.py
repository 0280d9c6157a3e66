"""
ComiTe Reading Backend API
FastAPI application for read tracking, flairs and upload signing
"""
import os
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uvicorn

from comite.core.config import settings
from comite.core.exceptions import ComiteException, RateLimitException
from comite.core.middleware import CorsHeadersMiddleware, SecurityHeadersMiddleware
from comite.core.responses import error_response
from comite.api.v1.dependencies import get_reading_tracker
from comite.api.v1.router import api_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup
    logger.info("🚀 Starting ComiTe Reading Backend...")
    logger.debug(f"Debug mode: {settings.DEBUG}")
    logger.debug(f"Log level: {settings.LOG_LEVEL}")

    yield

    # Shutdown
    if get_reading_tracker.cache_info().currsize:
        get_reading_tracker().shutdown()
    logger.info("🛑 Shutting down ComiTe Reading Backend...")


# Create FastAPI app
app = FastAPI(
    title="ComiTe API",
    description="Backend API for the ComiTe comic reader",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Security middleware (order matters - CORS is added last so it runs first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorsHeadersMiddleware, allow_origins=settings.cors_allow_origins)

if not settings.cors_allow_origins:
    logger.warning("⚠️  CORS wildcard enabled. Set CORS_ALLOW_ORIGIN in production!")


@app.exception_handler(ComiteException)
async def comite_exception_handler(request: Request, exc: ComiteException):
    """Map service exceptions to HTTP errors, hiding internal details"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
        return JSONResponse(status_code=exc.status_code, content=error_response("Internal Server Error"))

    headers = None
    if isinstance(exc, RateLimitException):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.message), headers=headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_response("Internal Server Error"))


# API routes
app.include_router(api_router, prefix="/api/v1")


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "ComiTe Backend is running"}


if __name__ == "__main__":
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=port,
        reload=settings.DEBUG,
        log_level="info",
        access_log=True,
        log_config=None  # Use our custom logging config
    )
