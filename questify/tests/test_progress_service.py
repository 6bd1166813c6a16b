"""
Tests for ProgressAnalyzer.

Tests cover:
1. Percentage rounding and clamping
2. Daily/weekly progress
3. Pacing figures and failure alerts
"""
import pytest
from datetime import datetime, time, timedelta

from questify.services.progress_service import ProgressAnalyzer, completion_summary, to_percent
from questify.services.text_generation import TextGenerator
from conftest import FakeTextProvider, FailingTextProvider


def _created(today, days_ago):
    return datetime.combine(today - timedelta(days=days_ago), time(9, 0))


class TestPercentages:
    """Tests for to_percent and completion_summary"""

    def test_rounds_half_up(self):
        assert to_percent(0.125) == 13
        assert to_percent(0.375) == 38

    def test_thirds(self):
        assert to_percent(1 / 3) == 33
        assert to_percent(2 / 3) == 67

    def test_zero_total(self):
        assert completion_summary(0, 0) == {"completed": 0, "total": 0, "percentage": 0}

    def test_completed_clamped_to_total(self):
        assert completion_summary(5, 3) == {"completed": 3, "total": 3, "percentage": 100}


class TestProgress:
    """Tests for progress"""

    def test_daily_and_weekly_ratios(self, db_session, make_user, make_goal, make_completion, today, text_generator):
        user = make_user()
        daily_done = make_goal(user, frequency="daily")
        make_goal(user, frequency="daily")
        weekly_done = make_goal(user, frequency="weekly")
        make_goal(user, frequency="weekly")
        make_goal(user, frequency="weekly")
        make_completion(daily_done, today)
        # Monday of the current week
        make_completion(weekly_done, today - timedelta(days=2))

        result = ProgressAnalyzer(db_session, text_generator).progress(user.id, today)

        assert result["daily"] == {"completed": 1, "total": 2, "percentage": 50}
        assert result["weekly"] == {"completed": 1, "total": 3, "percentage": 33}

    def test_yesterday_does_not_count_today(self, db_session, make_user, make_goal, make_completion, today, text_generator):
        user = make_user()
        goal = make_goal(user)
        make_completion(goal, today - timedelta(days=1))

        result = ProgressAnalyzer(db_session, text_generator).progress(user.id, today)
        assert result["daily"]["completed"] == 0

    def test_last_week_does_not_count(self, db_session, make_user, make_goal, make_completion, today, text_generator):
        user = make_user()
        goal = make_goal(user, frequency="weekly")
        # Saturday of the previous week
        make_completion(goal, today - timedelta(days=4))

        result = ProgressAnalyzer(db_session, text_generator).progress(user.id, today)
        assert result["weekly"] == {"completed": 0, "total": 1, "percentage": 0}

    def test_no_goals(self, db_session, make_user, today, text_generator):
        user = make_user()
        result = ProgressAnalyzer(db_session, text_generator).progress(user.id, today)
        assert result["daily"]["percentage"] == 0
        assert result["weekly"]["percentage"] == 0


class TestFailureAlerts:
    """Tests for pacing and failure_alerts"""

    def _sixteen_day_goal(self, make_goal, user, today, frequency="daily"):
        """Created 8 days ago at 09:00 with a deadline 16 days after creation"""
        created_at = _created(today, 8)
        return make_goal(
            user,
            frequency=frequency,
            title="Read daily",
            category="learning",
            created_at=created_at,
            deadline=created_at.date() + timedelta(days=16)
        )

    def test_pacing_figures(self, db_session, make_user, make_goal, today, text_generator):
        user = make_user()
        goal = self._sixteen_day_goal(make_goal, user, today)

        pace = ProgressAnalyzer(db_session, text_generator).pacing(goal, 4, today)

        assert pace["total_days"] == 16
        assert pace["days_passed"] == 8
        assert pace["tasks_needed"] == 16
        assert pace["expected_rate"] == 0.5
        assert pace["actual_rate"] == 0.25

    def test_alert_when_behind(self, db_session, make_user, make_goal, make_completion, today, text_provider):
        user = make_user()
        goal = self._sixteen_day_goal(make_goal, user, today)
        for days_ago in range(1, 5):
            make_completion(goal, today - timedelta(days=days_ago))

        analyzer = ProgressAnalyzer(db_session, TextGenerator(text_provider))
        alerts = analyzer.failure_alerts(user.id, today)

        assert alerts == [{
            "goal_id": goal.id,
            "goal_title": "Read daily",
            "days_behind": 4,
            "expected_completion": 50,
            "actual_completion": 25,
            "ai_message": text_provider.reply,
        }]
        assert "learning" in text_provider.prompts[0]

    def test_no_alert_when_close_to_pace(self, db_session, make_user, make_goal, make_completion, today, text_generator):
        """A gap of 0.1875 stays under the threshold"""
        user = make_user()
        goal = self._sixteen_day_goal(make_goal, user, today)
        for days_ago in range(1, 6):
            make_completion(goal, today - timedelta(days=days_ago))

        assert ProgressAnalyzer(db_session, text_generator).failure_alerts(user.id, today) == []

    def test_alert_at_exact_threshold(self, db_session, make_user, make_goal, make_completion, today, text_generator):
        """20 day goal, halfway through, 6 of 20 done: gap is exactly 0.20"""
        user = make_user()
        created_at = _created(today, 10)
        goal = make_goal(user, created_at=created_at, deadline=created_at.date() + timedelta(days=20))
        for days_ago in range(1, 7):
            make_completion(goal, today - timedelta(days=days_ago))

        alerts = ProgressAnalyzer(db_session, text_generator).failure_alerts(user.id, today)

        assert len(alerts) == 1
        assert alerts[0]["days_behind"] == 4
        assert alerts[0]["expected_completion"] == 50
        assert alerts[0]["actual_completion"] == 30

    def test_weekly_goal_tasks_needed_by_week(self, db_session, make_user, make_goal, make_completion, today, text_generator):
        user = make_user()
        goal = self._sixteen_day_goal(make_goal, user, today, frequency="weekly")
        analyzer = ProgressAnalyzer(db_session, text_generator)

        assert analyzer.pacing(goal, 0, today)["tasks_needed"] == 3
        alerts = analyzer.failure_alerts(user.id, today)
        assert alerts[0]["days_behind"] == 8

        make_completion(goal, today)
        assert analyzer.failure_alerts(user.id, today) == []

    def test_goals_without_deadline_skipped(self, db_session, make_user, make_goal, today, text_generator):
        user = make_user()
        make_goal(user, created_at=_created(today, 8))
        assert ProgressAnalyzer(db_session, text_generator).failure_alerts(user.id, today) == []

    def test_goal_due_today_or_past_skipped(self, db_session, make_user, make_goal, today, text_generator):
        user = make_user()
        make_goal(user, created_at=_created(today, 8), deadline=today)
        make_goal(user, created_at=_created(today, 8), deadline=today - timedelta(days=1))
        assert ProgressAnalyzer(db_session, text_generator).failure_alerts(user.id, today) == []

    def test_alert_message_falls_back(self, db_session, make_user, make_goal, today):
        user = make_user()
        self._sixteen_day_goal(make_goal, user, today)

        analyzer = ProgressAnalyzer(db_session, TextGenerator(FailingTextProvider()))
        alerts = analyzer.failure_alerts(user.id, today)

        assert len(alerts) == 1
        assert alerts[0]["ai_message"]
