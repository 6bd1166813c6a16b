"""
Tests for StreakTracker.

Tests cover:
1. The streak state machine (no store needed)
2. Daily decay
3. Streak read model
"""
import pytest
from datetime import date, timedelta

from questify.models import User
from questify.services.streak_service import StreakTracker
from questify.exceptions import UserNotFoundException


TODAY = date(2024, 3, 13)


def _user(last_activity=None, current=0, longest=0):
    return User(
        username="walker",
        email="walker@example.com",
        last_activity_date=last_activity,
        current_streak=current,
        longest_streak=longest
    )


class TestAdvance:
    """Tests for the advance state machine"""

    def test_first_activity_starts_streak(self):
        user = _user()
        assert StreakTracker.advance(user, TODAY) == 1
        assert user.longest_streak == 1
        assert user.last_activity_date == TODAY

    def test_first_activity_keeps_higher_longest(self):
        user = _user(longest=5)
        StreakTracker.advance(user, TODAY)
        assert user.longest_streak == 5

    def test_consecutive_day_increments(self):
        user = _user(TODAY - timedelta(days=1), current=4, longest=4)
        assert StreakTracker.advance(user, TODAY) == 5
        assert user.longest_streak == 5

    def test_consecutive_day_below_longest(self):
        user = _user(TODAY - timedelta(days=1), current=2, longest=9)
        assert StreakTracker.advance(user, TODAY) == 3
        assert user.longest_streak == 9

    def test_same_day_is_noop(self):
        """A second activity on the same day should not change anything"""
        user = _user(TODAY, current=3, longest=6)
        assert StreakTracker.advance(user, TODAY) == 3
        assert user.current_streak == 3
        assert user.longest_streak == 6

    def test_gap_resets_to_one(self):
        user = _user(TODAY - timedelta(days=2), current=6, longest=6)
        assert StreakTracker.advance(user, TODAY) == 1
        assert user.longest_streak == 6
        assert user.last_activity_date == TODAY

    def test_longest_never_below_current(self):
        user = _user()
        day = TODAY
        for _ in range(10):
            StreakTracker.advance(user, day)
            assert user.longest_streak >= user.current_streak
            day += timedelta(days=1)
        assert user.current_streak == 10


class TestDecay:
    """Tests for the daily decay sweep"""

    def test_resets_only_stale_streaks(self, db_session, make_user, today):
        stale = make_user(last_activity_date=today - timedelta(days=3), current_streak=4, longest_streak=7)
        active = make_user(last_activity_date=today - timedelta(days=1), current_streak=2, longest_streak=2)
        fresh = make_user(last_activity_date=today, current_streak=1, longest_streak=1)
        never = make_user()

        reset = StreakTracker(db_session).decay(today)
        db_session.commit()

        assert reset == 1
        for user in (stale, active, fresh, never):
            db_session.refresh(user)
        assert stale.current_streak == 0
        assert stale.longest_streak == 7
        assert active.current_streak == 2
        assert fresh.current_streak == 1
        assert never.current_streak == 0

    def test_already_zero_not_counted(self, db_session, make_user, today):
        make_user(last_activity_date=today - timedelta(days=10), current_streak=0, longest_streak=3)
        assert StreakTracker(db_session).decay(today) == 0

    def test_yesterday_activity_survives(self, db_session, make_user, today):
        """A user who was active yesterday can still extend today"""
        user = make_user(last_activity_date=today - timedelta(days=1), current_streak=5, longest_streak=5)
        StreakTracker(db_session).decay(today)
        db_session.commit()
        db_session.refresh(user)
        assert user.current_streak == 5


class TestGetStreak:
    """Tests for get_streak"""

    def test_returns_streak_fields(self, db_session, make_user, today):
        user = make_user(last_activity_date=today, current_streak=3, longest_streak=8)
        result = StreakTracker(db_session).get_streak(user.id)
        assert result == {"current_streak": 3, "longest_streak": 8, "last_activity_date": today}

    def test_unknown_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            StreakTracker(db_session).get_streak(999)
