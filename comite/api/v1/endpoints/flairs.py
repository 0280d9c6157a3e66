"""
Rank and genre flair endpoints
"""
from typing import List
from fastapi import APIRouter, Depends

from ....core.responses import success_response
from ....models.reading_stats import FlairResult, FlairPreferencesUpdate
from ....services.reading_stats_service import ReadingStatsService
from ..dependencies import get_current_user, get_stats_service

router = APIRouter()


@router.get("/me/eligible", response_model=List[str])
async def get_eligible_genres(
    current_user_id: str = Depends(get_current_user),
    stats_service: ReadingStatsService = Depends(get_stats_service),
):
    """Genres the current user may pick as flairs"""
    return stats_service.get_eligible_genres(current_user_id)


@router.get("/me/preferences", response_model=List[str])
async def get_flair_preferences(
    current_user_id: str = Depends(get_current_user),
    stats_service: ReadingStatsService = Depends(get_stats_service),
):
    return stats_service.get_flair_preferences(current_user_id)


@router.put("/me/preferences")
async def save_flair_preferences(
    payload: FlairPreferencesUpdate,
    current_user_id: str = Depends(get_current_user),
    stats_service: ReadingStatsService = Depends(get_stats_service),
):
    """Save a manual genre flair selection (empty list restores automatic flairs)"""
    genres = stats_service.save_flair_preferences(current_user_id, payload.genres)
    return success_response("Flair preferences saved", data=genres)


@router.get("/{user_id}", response_model=FlairResult)
async def get_user_flairs(
    user_id: str,
    stats_service: ReadingStatsService = Depends(get_stats_service),
):
    """Public rank and genre flairs, shown next to comments and on profiles"""
    override = stats_service.get_flair_preferences(user_id)
    return stats_service.get_user_flairs(user_id, override)
