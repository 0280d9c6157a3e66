"""
Reading validity tracker

Decides whether a chapter view was a genuine read. Three signals must all
hold when the view ends: sustained active time, scroll depth, and the share
of page images that actually became visible. A periodic tick accrues active
time only while the reader keeps producing activity signals, so an idle tab
earns nothing.
"""
import logging
from typing import Dict, List, Optional, Tuple

from ..core.scheduling import AsyncioScheduler, Clock, monotonic_clock
from ..models.reading_stats import ReadSession, ReadSessionSnapshot
from .reading_stats_service import ReadingStatsService

logger = logging.getLogger(__name__)

TICK_SECONDS = 5
INACTIVITY_SECONDS = 15

MIN_ACTIVE_SECONDS = 45
MIN_SCROLL_DEPTH_PCT = 80
MIN_IMAGE_RATIO = 0.70

SessionKey = Tuple[str, str]


def is_valid_read(session: ReadSession) -> bool:
    """All three thresholds must be met; a chapter without images passes the image check"""
    return (
        session.active_seconds >= MIN_ACTIVE_SECONDS
        and session.scroll_depth_pct >= MIN_SCROLL_DEPTH_PCT
        and session.image_ratio >= MIN_IMAGE_RATIO
    )


class ReadingTracker:
    """Tracks chapter read sessions per (user, chapter)"""

    def __init__(self, stats_service: ReadingStatsService, clock: Clock = monotonic_clock, scheduler=None):
        self.stats_service = stats_service
        self.clock = clock
        self.scheduler = scheduler or AsyncioScheduler()
        self._sessions: Dict[SessionKey, ReadSession] = {}
        self._ticks: Dict[SessionKey, object] = {}

    def _get(self, user_id: str, chapter_id: str) -> Optional[ReadSession]:
        return self._sessions.get((user_id, chapter_id))

    def start_session(self, user_id: str, chapter_id: str, series_id: str, total_images: int) -> bool:
        """
        Begin tracking a chapter view.

        Ignored when the chapter is already being tracked or was already
        credited to the user. Returns whether a new session started.
        """
        key = (user_id, chapter_id)
        if key in self._sessions:
            return False
        if self.stats_service.has_valid_read(user_id, chapter_id):
            logger.debug(f"Chapter {chapter_id} already read by {user_id}, not tracking")
            return False

        session = ReadSession(
            user_id=user_id,
            chapter_id=chapter_id,
            series_id=series_id,
            total_images=max(0, total_images),
            last_activity_at=self.clock(),
        )
        self._sessions[key] = session

        handle = None

        def tick():
            if self._sessions.get(key) is not session:
                if handle is not None:
                    handle.cancel()
                return
            self._tick(session)

        handle = self.scheduler.call_every(TICK_SECONDS, tick)
        self._ticks[key] = handle
        logger.debug(f"Started read session {user_id}/{chapter_id} ({session.total_images} images)")
        return True

    def _tick(self, session: ReadSession) -> None:
        if session.hidden:
            return
        if self.clock() - session.last_activity_at <= INACTIVITY_SECONDS:
            session.active_seconds += TICK_SECONDS

    def record_activity(self, user_id: str, chapter_id: str) -> None:
        """Scroll, pointer, touch, key or click signal"""
        session = self._get(user_id, chapter_id)
        if session:
            session.last_activity_at = self.clock()

    def record_scroll_depth(self, user_id: str, chapter_id: str, pct: float) -> None:
        session = self._get(user_id, chapter_id)
        if session:
            pct = min(100.0, max(0.0, pct))
            session.scroll_depth_pct = max(session.scroll_depth_pct, pct)

    def record_image_seen(self, user_id: str, chapter_id: str, image_id: Optional[str] = None) -> None:
        """
        Count an image that crossed the visibility threshold.

        Without an ``image_id`` the caller must not report the same image
        twice; with one, repeats within the session are ignored.
        """
        session = self._get(user_id, chapter_id)
        if not session:
            return
        if image_id is not None:
            if image_id in session.seen_image_ids:
                return
            session.seen_image_ids.add(image_id)
        session.images_seen = min(session.images_seen + 1, session.total_images)

    def record_visibility(self, user_id: str, chapter_id: str, visible: bool) -> None:
        """Hidden pages do not accrue active time"""
        session = self._get(user_id, chapter_id)
        if session:
            session.hidden = not visible
            if visible:
                session.last_activity_at = self.clock()

    def active_session(self, user_id: str, chapter_id: str) -> Optional[ReadSessionSnapshot]:
        session = self._get(user_id, chapter_id)
        if session is None:
            return None
        return ReadSessionSnapshot(
            chapter_id=session.chapter_id,
            series_id=session.series_id,
            active_seconds=session.active_seconds,
            scroll_depth_pct=session.scroll_depth_pct,
            images_seen=session.images_seen,
            total_images=session.total_images,
            hidden=session.hidden,
        )

    def end_session(self, user_id: str, chapter_id: str, genres: List[str]) -> bool:
        """
        Stop tracking and credit the read if it was valid.

        Args:
            genres: Genre list of the chapter's series

        Returns:
            True if the view counted as a valid read and was credited
        """
        key = (user_id, chapter_id)
        self._cancel_tick(key)
        session = self._sessions.pop(key, None)
        if session is None:
            return False

        if not is_valid_read(session):
            logger.debug(
                f"Read of {chapter_id} by {user_id} not valid: active={session.active_seconds}s "
                f"depth={session.scroll_depth_pct}% images={session.images_seen}/{session.total_images}"
            )
            return False

        return self.stats_service.apply_valid_read(
            user_id, genres, chapter_id=chapter_id, series_id=session.series_id
        )

    def _cancel_tick(self, key: SessionKey) -> None:
        handle = self._ticks.pop(key, None)
        if handle is not None:
            handle.cancel()

    def shutdown(self) -> None:
        """Drop every session without crediting it"""
        for key in list(self._ticks):
            self._cancel_tick(key)
        self._sessions.clear()
