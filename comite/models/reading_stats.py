"""
Reading statistics and validity tracking models
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Set
from datetime import datetime


class ReadSession(BaseModel):
    """In-progress chapter view, owned by the tracker until it ends"""
    user_id: str
    chapter_id: str
    series_id: str

    active_seconds: int = 0
    scroll_depth_pct: float = 0.0  # high-water mark, 0-100
    images_seen: int = 0
    total_images: int = 0
    last_activity_at: float = 0.0  # tracker clock reading

    seen_image_ids: Set[str] = Field(default_factory=set)
    hidden: bool = False

    @property
    def image_ratio(self) -> float:
        if self.total_images <= 0:
            return 1.0
        return self.images_seen / self.total_images


class ReadSessionSnapshot(BaseModel):
    chapter_id: str
    series_id: str
    active_seconds: int
    scroll_depth_pct: float
    images_seen: int
    total_images: int
    hidden: bool


class ReadingHistoryEntry(BaseModel):
    series_id: Optional[str] = None
    chapter_id: str
    read_at: datetime = Field(default_factory=datetime.utcnow)


class SeriesProgress(BaseModel):
    series_id: str
    read: int
    total: int


class UserReadingStats(BaseModel):
    """Cumulative per-user statistics, updated only by validated reads"""
    user_id: str
    total_chapters_read: int = 0
    genre_counts: Dict[str, int] = {}  # insertion order breaks count ties
    read_chapter_ids: List[str] = []
    history: List[ReadingHistoryEntry] = []  # one entry per credited chapter
    last_updated: datetime = Field(default_factory=datetime.utcnow)


class FlairResult(BaseModel):
    rank: str
    genres: List[str]


class StartSessionRequest(BaseModel):
    chapter_id: str
    series_id: str
    total_images: Optional[int] = Field(default=None, ge=0)


class ScrollDepthUpdate(BaseModel):
    depth: float


class ImageSeenUpdate(BaseModel):
    image_id: Optional[str] = None


class VisibilityUpdate(BaseModel):
    visible: bool


class EndSessionRequest(BaseModel):
    series_id: Optional[str] = None
    genres: Optional[List[str]] = None


class FlairPreferencesUpdate(BaseModel):
    genres: List[str]
