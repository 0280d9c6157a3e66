import os

import pytest
from fastapi.testclient import TestClient

# Keep tests off any real Firebase project and use the wildcard CORS policy
os.environ.pop("FIREBASE_PROJECT_ID", None)
os.environ["CORS_ALLOW_ORIGIN"] = "*"

from main import app
from comite.api.v1.dependencies import (
    get_current_user,
    get_document_store,
    get_reading_tracker,
    get_upload_signing_service,
)
from comite.core.rate_limit import FixedWindowRateLimiter
from comite.services.base.document_store import InMemoryDocumentStore
from comite.services.reading_stats_service import ReadingStatsService
from comite.services.reading_tracker import ReadingTracker
from comite.services.series_catalog import SeriesCatalog
from comite.services.upload_signing_service import UploadSigningService

from helpers import FakeSigner, ManualClock, ManualScheduler, PUBLIC_BASE, READER_ID, SHARED_SECRET


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def stats_service(store):
    return ReadingStatsService(store)


@pytest.fixture
def catalog(store):
    return SeriesCatalog(store)


@pytest.fixture
def tracker(stats_service, clock, scheduler):
    return ReadingTracker(stats_service, clock=clock, scheduler=scheduler)


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def upload_service(signer, clock):
    limiter = FixedWindowRateLimiter(calls=20, period=60, clock=clock)
    return UploadSigningService(signer, SHARED_SECRET, PUBLIC_BASE, rate_limiter=limiter)


@pytest.fixture
def client(store, tracker, upload_service):
    """Real app with test doubles for identity, storage, tracker and signer"""
    app.dependency_overrides[get_current_user] = lambda: READER_ID
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_reading_tracker] = lambda: tracker
    app.dependency_overrides[get_upload_signing_service] = lambda: upload_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
