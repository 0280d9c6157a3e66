"""
Reading session tracking endpoints
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from ....models.reading_stats import (
    StartSessionRequest, ScrollDepthUpdate, ImageSeenUpdate, VisibilityUpdate,
    EndSessionRequest, ReadSessionSnapshot, UserReadingStats, ReadingHistoryEntry, SeriesProgress,
)
from ....services.reading_stats_service import ReadingStatsService
from ....services.reading_tracker import ReadingTracker
from ....services.series_catalog import SeriesCatalog
from ..dependencies import get_current_user, get_reading_tracker, get_series_catalog, get_stats_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sessions")
async def start_session(
    payload: StartSessionRequest,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
    catalog: SeriesCatalog = Depends(get_series_catalog),
):
    """Start tracking a chapter view"""
    # the catalog's page count wins; a client count is only used for chapters it does not know
    total_images = catalog.total_images_for(payload.series_id, payload.chapter_id)
    if total_images is None:
        total_images = payload.total_images
    elif payload.total_images is not None and payload.total_images != total_images:
        logger.warning(
            f"Ignoring client image count {payload.total_images} for {payload.series_id}/{payload.chapter_id}, "
            f"catalog has {total_images}"
        )
    if total_images is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Chapter not found"
        )

    started = tracker.start_session(current_user_id, payload.chapter_id, payload.series_id, total_images)
    return {"started": started}


@router.get("/sessions/{chapter_id}", response_model=ReadSessionSnapshot)
async def get_session(
    chapter_id: str,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
):
    snapshot = tracker.active_session(current_user_id, chapter_id)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active reading session"
        )
    return snapshot


@router.post("/sessions/{chapter_id}/activity", status_code=status.HTTP_204_NO_CONTENT)
async def record_activity(
    chapter_id: str,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
):
    tracker.record_activity(current_user_id, chapter_id)


@router.post("/sessions/{chapter_id}/scroll", status_code=status.HTTP_204_NO_CONTENT)
async def record_scroll(
    chapter_id: str,
    payload: ScrollDepthUpdate,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
):
    # scrolling is also an activity signal
    tracker.record_activity(current_user_id, chapter_id)
    tracker.record_scroll_depth(current_user_id, chapter_id, payload.depth)


@router.post("/sessions/{chapter_id}/images", status_code=status.HTTP_204_NO_CONTENT)
async def record_image(
    chapter_id: str,
    payload: ImageSeenUpdate,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
):
    tracker.record_image_seen(current_user_id, chapter_id, payload.image_id)


@router.post("/sessions/{chapter_id}/visibility", status_code=status.HTTP_204_NO_CONTENT)
async def record_visibility(
    chapter_id: str,
    payload: VisibilityUpdate,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
):
    tracker.record_visibility(current_user_id, chapter_id, payload.visible)


@router.post("/sessions/{chapter_id}/end")
async def end_session(
    chapter_id: str,
    payload: EndSessionRequest,
    current_user_id: str = Depends(get_current_user),
    tracker: ReadingTracker = Depends(get_reading_tracker),
    catalog: SeriesCatalog = Depends(get_series_catalog),
):
    """End a chapter view and report whether it counted as a read"""
    # the series the session was started with wins over one named in the body
    snapshot = tracker.active_session(current_user_id, chapter_id)
    series_id = snapshot.series_id if snapshot else payload.series_id
    series = catalog.get_series(series_id) if series_id else None
    if series is not None:
        genres = list(series.genre)
    else:
        genres = payload.genres or []

    valid = tracker.end_session(current_user_id, chapter_id, genres)
    logger.info(f"Reading session {current_user_id}/{chapter_id} ended, valid={valid}")
    return {"valid": valid}


@router.get("/stats", response_model=UserReadingStats)
async def get_stats(
    current_user_id: str = Depends(get_current_user),
    stats_service: ReadingStatsService = Depends(get_stats_service),
):
    """Get the current user's reading statistics"""
    return stats_service.get_user_stats(current_user_id) or UserReadingStats(user_id=current_user_id)


@router.get("/history", response_model=List[ReadingHistoryEntry])
async def get_reading_history(
    current_user_id: str = Depends(get_current_user),
    stats_service: ReadingStatsService = Depends(get_stats_service),
):
    """Get the current user's credited reads, most recent first"""
    return stats_service.get_reading_history(current_user_id)


@router.get("/series/{series_id}/progress", response_model=SeriesProgress)
async def get_series_progress(
    series_id: str,
    current_user_id: str = Depends(get_current_user),
    stats_service: ReadingStatsService = Depends(get_stats_service),
    catalog: SeriesCatalog = Depends(get_series_catalog),
):
    """Get how many chapters of a series the current user has read"""
    series = catalog.get_series(series_id)
    if series is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Series not found"
        )
    return stats_service.get_series_progress(current_user_id, series)
