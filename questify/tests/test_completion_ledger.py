"""
Tests for CompletionLedger.

Tests cover:
1. Recording completions with the right period key and tariff
2. One completion per period
3. Store-level rejection of duplicates
"""
import pytest
from datetime import date, timedelta
from sqlalchemy.exc import IntegrityError

from questify.models import Completion
from questify.services.completion_ledger import CompletionLedger
from questify.exceptions import DuplicateCompletionException


class TestRecord:
    """Tests for record"""

    def test_daily_completion_keyed_by_day(self, db_session, make_user, make_goal, today):
        user = make_user()
        goal = make_goal(user, frequency="daily")

        completion = CompletionLedger(db_session).record(goal.id, user.id, "daily", today)

        assert completion.period_key == today
        assert completion.completed_date == today
        assert completion.points_earned == 10

    def test_weekly_completion_keyed_by_week_start(self, db_session, make_user, make_goal, today):
        user = make_user()
        goal = make_goal(user, frequency="weekly")

        completion = CompletionLedger(db_session).record(goal.id, user.id, "weekly", today)

        assert completion.period_key == date(2024, 3, 10)
        assert completion.points_earned == 50

    def test_second_daily_completion_same_day_rejected(self, db_session, make_user, make_goal, today):
        """Completing the same daily goal twice on one day should fail"""
        user = make_user()
        goal = make_goal(user)
        ledger = CompletionLedger(db_session)
        ledger.record(goal.id, user.id, "daily", today)
        db_session.commit()

        with pytest.raises(DuplicateCompletionException):
            ledger.record(goal.id, user.id, "daily", today)

    def test_daily_completion_next_day_allowed(self, db_session, make_user, make_goal, today):
        user = make_user()
        goal = make_goal(user)
        ledger = CompletionLedger(db_session)
        ledger.record(goal.id, user.id, "daily", today - timedelta(days=1))
        db_session.commit()

        ledger.record(goal.id, user.id, "daily", today)
        db_session.commit()

        assert ledger.count_for_goal(goal.id) == 2

    def test_weekly_completion_later_same_week_rejected(self, db_session, make_user, make_goal):
        """Tuesday and Thursday of one week share a period"""
        user = make_user()
        goal = make_goal(user, frequency="weekly")
        ledger = CompletionLedger(db_session)
        ledger.record(goal.id, user.id, "weekly", date(2024, 3, 12))
        db_session.commit()

        with pytest.raises(DuplicateCompletionException):
            ledger.record(goal.id, user.id, "weekly", date(2024, 3, 14))

    def test_weekly_completion_next_week_allowed(self, db_session, make_user, make_goal):
        user = make_user()
        goal = make_goal(user, frequency="weekly")
        ledger = CompletionLedger(db_session)
        ledger.record(goal.id, user.id, "weekly", date(2024, 3, 16))
        db_session.commit()

        completion = ledger.record(goal.id, user.id, "weekly", date(2024, 3, 17))
        assert completion.period_key == date(2024, 3, 17)


class TestHasCompletedPeriod:
    """Tests for has_completed_period"""

    def test_false_before_and_true_after(self, db_session, make_user, make_goal, make_completion, today):
        user = make_user()
        goal = make_goal(user)
        ledger = CompletionLedger(db_session)

        assert ledger.has_completed_period(goal.id, user.id, "daily", today) is False
        make_completion(goal, today)
        assert ledger.has_completed_period(goal.id, user.id, "daily", today) is True


class TestUniqueConstraint:
    """The store itself rejects a second row for a period"""

    def test_direct_duplicate_insert_fails(self, db_session, make_user, make_goal, make_completion, today):
        user = make_user()
        goal = make_goal(user)
        make_completion(goal, today)

        db_session.add(Completion(
            goal_id=goal.id,
            user_id=user.id,
            completed_date=today,
            period_key=today,
            points_earned=10
        ))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_race_loser_gets_duplicate_exception(
        self, db_session, session_factory, make_user, make_goal, today
    ):
        """A writer that passed the check before the other committed still gets a clean rejection"""
        user = make_user()
        goal = make_goal(user)

        other_session = session_factory()
        try:
            CompletionLedger(other_session).record(goal.id, user.id, "daily", today)
            other_session.commit()
        finally:
            other_session.close()

        ledger = CompletionLedger(db_session)
        # Simulate the loser having already passed the existence check
        ledger.repo.get_for_period = lambda *args: None

        with pytest.raises(DuplicateCompletionException):
            ledger.record(goal.id, user.id, "daily", today)
        assert ledger.count_for_goal(goal.id) == 1
