"""
Tests for LeaderboardService.

Tests cover:
1. Current month leaderboard and caller rank
2. All-time leaderboard and history
3. Profile stats
"""
import pytest
from datetime import datetime

from questify.models import LeaderboardHistoryEntry
from questify.repositories.leaderboard_repository import MonthlyLeaderboardRepository
from questify.services.leaderboard_service import LeaderboardService
from questify.exceptions import UserNotFoundException


@pytest.fixture
def boards(db_session, date_service, text_generator):
    return LeaderboardService(db_session, date_service, text_generator)


@pytest.fixture
def scored(db_session, make_user):
    """Create a user with a monthly entry"""
    def _scored(username, points, **fields):
        user = make_user(username, **fields)
        MonthlyLeaderboardRepository.create(db_session, user.id, points)
        db_session.commit()
        return user
    return _scored


class TestCurrentLeaderboard:
    """Tests for current_leaderboard"""

    def test_ranked_with_tie_break(self, boards, scored):
        scored("late", 50, created_at=datetime(2024, 2, 1))
        scored("early", 50, created_at=datetime(2024, 1, 1))
        scored("top", 90)
        scored("zero", 0)

        result = boards.current_leaderboard()

        assert [(row["rank"], row["username"]) for row in result["leaderboard"]] == [
            (1, "top"), (2, "early"), (3, "late")
        ]
        assert (result["month"], result["year"]) == (3, 2024)
        assert result["user_rank"] is None

    def test_top_ten_only(self, boards, scored):
        for n in range(12):
            scored(f"player{n}", 10 + n)
        assert len(boards.current_leaderboard()["leaderboard"]) == 10

    def test_caller_rank(self, boards, scored):
        scored("top", 90)
        me = scored("me", 40)
        scored("tied", 40)

        result = boards.current_leaderboard(me.id)
        assert result["user_rank"] == {"rank": 2, "points": 40}

    def test_missing_entry_created_with_rank_zero(self, db_session, boards, make_user):
        user = make_user()

        result = boards.current_leaderboard(user.id)

        assert result["user_rank"] == {"rank": 0, "points": 0}
        assert MonthlyLeaderboardRepository.get_by_user(db_session, user.id) is not None

    def test_unknown_caller(self, boards):
        with pytest.raises(UserNotFoundException):
            boards.current_leaderboard(404)


class TestAllTimeAndHistory:
    """Tests for all_time_leaderboard and leaderboard_history"""

    def test_all_time_by_total_points(self, boards, make_user):
        make_user("steady", total_points=500)
        make_user("newbie", total_points=20)
        make_user("veteran", total_points=900)

        rows = boards.all_time_leaderboard()
        assert [row["username"] for row in rows] == ["veteran", "steady", "newbie"]
        assert rows[0]["rank"] == 1

    def test_history_newest_first_limited_to_twelve(self, db_session, boards, make_user):
        user = make_user()
        for month in range(1, 13):
            db_session.add(LeaderboardHistoryEntry(
                user_id=user.id, month=month, year=2023, final_points=month, rank=1
            ))
        db_session.add(LeaderboardHistoryEntry(
            user_id=user.id, month=1, year=2024, final_points=99, rank=2
        ))
        db_session.commit()

        history = boards.leaderboard_history(user.id)

        assert len(history) == 12
        assert history[0] == {"month": 1, "year": 2024, "final_points": 99, "rank": 2}
        assert (history[-1]["month"], history[-1]["year"]) == (2, 2023)


class TestUserStats:
    """Tests for user_stats"""

    def test_counts(self, db_session, boards, make_user, make_goal, make_completion, scored, today):
        scored("leader", 100)
        user = scored("me", 30)
        goal = make_goal(user)
        make_goal(user, title="Unstarted")
        make_completion(goal, today)

        stats = boards.user_stats(user.id)

        assert stats["user"]["username"] == "me"
        assert stats["stats"] == {
            "total_tasks": 1,
            "total_goals": 2,
            "completed_goals": 1,
            "friend_count": 0,
            "badge_count": 0,
            "monthly_points": 30,
            "current_rank": 2,
        }

    def test_rank_without_monthly_entry(self, boards, scored, make_user):
        """A user who never scored this month still gets rank 1"""
        scored("leader", 100)
        newcomer = make_user("newcomer")

        stats = boards.user_stats(newcomer.id)["stats"]

        assert stats["monthly_points"] == 0
        assert stats["current_rank"] == 1

    def test_unknown_user(self, boards):
        with pytest.raises(UserNotFoundException):
            boards.user_stats(404)


class TestQuote:

    def test_dashboard_quote(self, boards, text_provider):
        assert boards.dashboard_quote() == text_provider.reply
