"""
Reading statistics, ranks and genre flairs
"""
import logging
from typing import Dict, Iterable, List, Optional
from datetime import datetime

from ..core.exceptions import ValidationException
from ..models.reading_stats import FlairResult, ReadingHistoryEntry, SeriesProgress, UserReadingStats
from ..models.series import Series
from .base.document_store import DocumentStore

logger = logging.getLogger(__name__)

# Thresholds on total chapters read, highest first
RANKS = (
    (1000, "Archivist"),
    (500, "Binger"),
    (200, "Enthusiast"),
    (50, "Reader"),
)
DEFAULT_RANK = "Newbie"
DEFAULT_GENRE_FLAIR = "Explorer"
MAX_GENRE_FLAIRS = 3


def rank_for(total_chapters_read: int) -> str:
    """Rank label for a number of validly read chapters"""
    for threshold, label in RANKS:
        if total_chapters_read >= threshold:
            return label
    return DEFAULT_RANK


def _unique(genres: Iterable[str]) -> List[str]:
    seen = []
    for genre in genres:
        if genre not in seen:
            seen.append(genre)
    return seen


def genre_flairs_for(genre_counts: Dict[str, int], manual_override: Optional[List[str]] = None) -> List[str]:
    """
    Pick up to three genre flairs.

    A non-empty manual override wins. Otherwise genres are ranked by count;
    ``sorted`` is stable, so equal counts keep the mapping's order.
    """
    if manual_override:
        genres = _unique(manual_override)[:MAX_GENRE_FLAIRS]
    else:
        ranked = sorted(genre_counts.items(), key=lambda item: item[1], reverse=True)
        genres = [genre for genre, _count in ranked][:MAX_GENRE_FLAIRS]
    return genres or [DEFAULT_GENRE_FLAIR]


class ReadingStatsService:
    """Service for cumulative reading statistics and flairs"""

    STATS_PREFIX = "reading-stats"
    FLAIRS_PREFIX = "flair-preferences"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _stats_key(self, user_id: str) -> str:
        return f"{self.STATS_PREFIX}/{user_id}"

    def _flairs_key(self, user_id: str) -> str:
        return f"{self.FLAIRS_PREFIX}/{user_id}"

    def get_user_stats(self, user_id: str) -> Optional[UserReadingStats]:
        """Get stats for a user, or None if they never completed a valid read"""
        data = self.store.get(self._stats_key(user_id))
        if not data:
            return None
        return UserReadingStats(**data)

    def has_valid_read(self, user_id: str, chapter_id: str) -> bool:
        stats = self.get_user_stats(user_id)
        return stats is not None and chapter_id in stats.read_chapter_ids

    def apply_valid_read(
        self,
        user_id: str,
        genres: List[str],
        chapter_id: Optional[str] = None,
        series_id: Optional[str] = None,
    ) -> bool:
        """
        Credit one validated chapter read

        Args:
            user_id: Reader
            genres: Genres of the chapter's series, duplicates counted once
            chapter_id: When given, a chapter already credited is ignored
                and the read is added to the reading history
            series_id: Series of the chapter, kept in the history entry

        Returns:
            True if the counters were incremented
        """
        stats = self.get_user_stats(user_id) or UserReadingStats(user_id=user_id)

        if chapter_id is not None:
            if chapter_id in stats.read_chapter_ids:
                logger.info(f"Chapter {chapter_id} already credited for user {user_id}")
                return False
            stats.read_chapter_ids.append(chapter_id)

        now = datetime.utcnow()
        stats.total_chapters_read += 1
        for genre in _unique(genres):
            stats.genre_counts[genre] = stats.genre_counts.get(genre, 0) + 1
        if chapter_id is not None:
            stats.history.append(ReadingHistoryEntry(series_id=series_id, chapter_id=chapter_id, read_at=now))
        stats.last_updated = now

        # counters, history and the credited chapter list go out in one write
        self.store.set(self._stats_key(user_id), stats.model_dump(mode="json"))
        logger.info(f"Credited valid read for user {user_id}: total={stats.total_chapters_read}")
        return True

    def get_reading_history(self, user_id: str) -> List[ReadingHistoryEntry]:
        """Credited reads, most recent first"""
        stats = self.get_user_stats(user_id)
        if stats is None:
            return []
        # appended in credit order
        return list(reversed(stats.history))

    def get_series_progress(self, user_id: str, series: Series) -> SeriesProgress:
        stats = self.get_user_stats(user_id)
        read_ids = set(stats.read_chapter_ids) if stats else set()
        read = sum(1 for chapter in series.chapters if chapter.id in read_ids)
        return SeriesProgress(series_id=series.id, read=read, total=len(series.chapters))

    def get_user_flairs(self, user_id: str, manual_override: Optional[List[str]] = None) -> FlairResult:
        """Rank plus genre flairs, honoring a manual genre selection"""
        stats = self.get_user_stats(user_id)
        if stats is None:
            return FlairResult(rank=DEFAULT_RANK, genres=[DEFAULT_GENRE_FLAIR])
        return FlairResult(
            rank=rank_for(stats.total_chapters_read),
            genres=genre_flairs_for(stats.genre_counts, manual_override),
        )

    def get_eligible_genres(self, user_id: str) -> List[str]:
        """Genres the user has at least one valid read in"""
        stats = self.get_user_stats(user_id)
        if stats is None:
            return []
        return [genre for genre, count in stats.genre_counts.items() if count > 0]

    def get_flair_preferences(self, user_id: str) -> List[str]:
        return self.store.get(self._flairs_key(user_id), default=[])

    def save_flair_preferences(self, user_id: str, genres: List[str]) -> List[str]:
        """
        Persist a manual genre flair selection

        Raises:
            ValidationException: On duplicates, more than three genres, or a
                genre the user has not read
        """
        if len(set(genres)) != len(genres):
            raise ValidationException("Flair genres must not repeat")
        if len(genres) > MAX_GENRE_FLAIRS:
            raise ValidationException(f"At most {MAX_GENRE_FLAIRS} flair genres can be selected")

        eligible = set(self.get_eligible_genres(user_id))
        ineligible = [genre for genre in genres if genre not in eligible]
        if ineligible:
            raise ValidationException(
                "Flair genres must come from genres you have read",
                details={"ineligible": ineligible}
            )

        self.store.set(self._flairs_key(user_id), genres)
        return genres
