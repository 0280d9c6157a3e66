"""
Main API router
"""
from fastapi import APIRouter

from .endpoints import reading_sessions, flairs, uploads

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(reading_sessions.router, prefix="/reading", tags=["reading"])
api_router.include_router(flairs.router, prefix="/flairs", tags=["flairs"])
api_router.include_router(uploads.router, prefix="/sign-upload", tags=["uploads"])
