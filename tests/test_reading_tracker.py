"""
Reading validity tracker tests driven by a manual clock.
"""
import pytest

from comite.models.reading_stats import ReadSession
from comite.services.reading_tracker import is_valid_read

USER = "reader-1"
CHAPTER = "ch-1"
SERIES = "series-1"
GENRES = ["Action", "Fantasy"]


def read_for(tracker, scheduler, seconds, user=USER, chapter=CHAPTER):
    """Advance time in 5 second steps, signalling activity after each tick"""
    for _ in range(seconds // 5):
        scheduler.advance(5)
        tracker.record_activity(user, chapter)


def full_read(tracker, scheduler, active=50, depth=85, images=8, total=10, chapter=CHAPTER):
    tracker.start_session(USER, chapter, SERIES, total)
    read_for(tracker, scheduler, active, chapter=chapter)
    tracker.record_scroll_depth(USER, chapter, depth)
    for _ in range(images):
        tracker.record_image_seen(USER, chapter)
    return tracker.end_session(USER, chapter, GENRES)


class TestValidityPredicate:

    @pytest.mark.parametrize(
        "active,depth,seen,total,expected",
        [
            (50, 85, 8, 10, True),
            (50, 79, 8, 10, False),
            (50, 85, 6, 10, False),
            (45, 80, 7, 10, True),
            (40, 100, 10, 10, False),
            (45, 80, 0, 0, True),
        ],
    )
    def test_thresholds(self, active, depth, seen, total, expected):
        session = ReadSession(
            user_id=USER, chapter_id=CHAPTER, series_id=SERIES,
            active_seconds=active, scroll_depth_pct=depth,
            images_seen=seen, total_images=total,
        )
        assert is_valid_read(session) is expected


class TestEndToEnd:

    def test_valid_read_is_credited(self, tracker, scheduler, stats_service):
        assert full_read(tracker, scheduler) is True

        stats = stats_service.get_user_stats(USER)
        assert stats.total_chapters_read == 1
        assert stats.genre_counts == {"Action": 1, "Fantasy": 1}
        assert CHAPTER in stats.read_chapter_ids

    def test_shallow_scroll_is_not_credited(self, tracker, scheduler, stats_service):
        assert full_read(tracker, scheduler, depth=79) is False
        assert stats_service.get_user_stats(USER) is None

    def test_too_few_images_is_not_credited(self, tracker, scheduler, stats_service):
        assert full_read(tracker, scheduler, images=6) is False
        assert stats_service.get_user_stats(USER) is None

    def test_too_little_time_is_not_credited(self, tracker, scheduler):
        assert full_read(tracker, scheduler, active=40) is False

    def test_chapter_without_images_passes_image_check(self, tracker, scheduler):
        assert full_read(tracker, scheduler, images=0, total=0) is True


class TestActiveTime:

    def test_idle_session_stops_accruing(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        scheduler.advance(120)

        # ticks at 5, 10 and 15 seconds are still inside the inactivity window
        assert tracker.active_session(USER, CHAPTER).active_seconds == 15

    def test_activity_resumes_accrual(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        scheduler.advance(60)
        frozen = tracker.active_session(USER, CHAPTER).active_seconds

        tracker.record_activity(USER, CHAPTER)
        scheduler.advance(10)

        assert tracker.active_session(USER, CHAPTER).active_seconds == frozen + 10

    def test_hidden_page_does_not_accrue(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        tracker.record_visibility(USER, CHAPTER, False)
        read_for(tracker, scheduler, 30)
        assert tracker.active_session(USER, CHAPTER).active_seconds == 0

        tracker.record_visibility(USER, CHAPTER, True)
        read_for(tracker, scheduler, 10)
        assert tracker.active_session(USER, CHAPTER).active_seconds == 10


class TestSessionLifecycle:

    def test_duplicate_start_is_ignored(self, tracker, scheduler):
        assert tracker.start_session(USER, CHAPTER, SERIES, 10) is True
        tracker.record_scroll_depth(USER, CHAPTER, 50)

        assert tracker.start_session(USER, CHAPTER, SERIES, 99) is False
        assert len(scheduler.active) == 1
        snapshot = tracker.active_session(USER, CHAPTER)
        assert snapshot.total_images == 10
        assert snapshot.scroll_depth_pct == 50

    def test_already_read_chapter_is_not_tracked(self, tracker, scheduler, stats_service):
        assert full_read(tracker, scheduler) is True

        assert tracker.start_session(USER, CHAPTER, SERIES, 10) is False
        assert tracker.active_session(USER, CHAPTER) is None
        assert stats_service.get_user_stats(USER).total_chapters_read == 1

    def test_end_cancels_tick(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        tracker.end_session(USER, CHAPTER, GENRES)
        assert scheduler.active == []

    def test_tick_cancels_itself_when_session_disappears(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        tracker._sessions.clear()

        scheduler.advance(5)

        assert scheduler.active == []

    def test_end_without_session(self, tracker):
        assert tracker.end_session(USER, "missing", GENRES) is False

    def test_sessions_are_per_user_and_chapter(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        tracker.start_session("reader-2", CHAPTER, SERIES, 10)
        tracker.record_scroll_depth("reader-2", CHAPTER, 90)

        assert tracker.active_session(USER, CHAPTER).scroll_depth_pct == 0
        assert tracker.active_session("reader-2", CHAPTER).scroll_depth_pct == 90

    def test_shutdown_drops_sessions(self, tracker, scheduler):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        tracker.shutdown()
        assert scheduler.active == []
        assert tracker.active_session(USER, CHAPTER) is None


class TestSignals:

    def test_scroll_depth_is_a_clamped_high_water_mark(self, tracker):
        tracker.start_session(USER, CHAPTER, SERIES, 10)

        tracker.record_scroll_depth(USER, CHAPTER, 60)
        tracker.record_scroll_depth(USER, CHAPTER, 30)
        assert tracker.active_session(USER, CHAPTER).scroll_depth_pct == 60

        tracker.record_scroll_depth(USER, CHAPTER, 140)
        assert tracker.active_session(USER, CHAPTER).scroll_depth_pct == 100

    def test_images_seen_is_capped(self, tracker):
        tracker.start_session(USER, CHAPTER, SERIES, 3)
        for _ in range(5):
            tracker.record_image_seen(USER, CHAPTER)
        assert tracker.active_session(USER, CHAPTER).images_seen == 3

    def test_repeated_image_id_counts_once(self, tracker):
        tracker.start_session(USER, CHAPTER, SERIES, 10)
        for image_id in ["p1", "p2", "p1", "p2", "p3"]:
            tracker.record_image_seen(USER, CHAPTER, image_id)
        assert tracker.active_session(USER, CHAPTER).images_seen == 3

    def test_signals_without_session_are_ignored(self, tracker):
        tracker.record_activity(USER, CHAPTER)
        tracker.record_scroll_depth(USER, CHAPTER, 90)
        tracker.record_image_seen(USER, CHAPTER)
        tracker.record_visibility(USER, CHAPTER, False)
        assert tracker.active_session(USER, CHAPTER) is None
