"""
Shared FastAPI dependencies
"""
import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ...core.config import settings
from ...core.firebase_config import initialize_firebase
from ...services.auth_service import AuthService
from ...services.base.document_store import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from ...services.reading_stats_service import ReadingStatsService
from ...services.reading_tracker import ReadingTracker
from ...services.series_catalog import SeriesCatalog
from ...services.upload_signing_service import UploadSigningService, build_upload_signing_service

logger = logging.getLogger(__name__)
security = HTTPBearer()


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Get current user from Firebase ID token"""
    decoded_token = AuthService().verify_firebase_token(credentials.credentials)
    firebase_uid = decoded_token.get("uid") if decoded_token else None

    if firebase_uid is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return firebase_uid


@lru_cache()
def get_document_store() -> DocumentStore:
    if initialize_firebase():
        return FirestoreDocumentStore(settings.DOCUMENTS_COLLECTION)
    logger.warning("⚠️  Using in-memory document store, data is lost on restart")
    return InMemoryDocumentStore()


def get_stats_service(store: DocumentStore = Depends(get_document_store)) -> ReadingStatsService:
    return ReadingStatsService(store)


def get_series_catalog(store: DocumentStore = Depends(get_document_store)) -> SeriesCatalog:
    return SeriesCatalog(store)


@lru_cache()
def get_reading_tracker() -> ReadingTracker:
    return ReadingTracker(ReadingStatsService(get_document_store()))


@lru_cache()
def get_upload_signing_service() -> UploadSigningService:
    return build_upload_signing_service()
