"""
Leaderboard and stats read models.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from questify.models import User
from questify.repositories.user_repository import UserRepository
from questify.repositories.goal_repository import GoalRepository, CompletionRepository
from questify.repositories.leaderboard_repository import (
    MonthlyLeaderboardRepository, LeaderboardHistoryRepository
)
from questify.repositories.badge_repository import BadgeRepository
from questify.repositories.social_repository import FriendshipRepository
from questify.services.date_service import DateService
from questify.services.text_generation import TextGenerator
from questify.services.transaction import ledger_transaction
from questify.constants import (
    LEADERBOARD_TOP_SIZE,
    LEADERBOARD_HISTORY_MONTHS,
    MESSAGE_DASHBOARD_QUOTE,
)
from questify.exceptions import UserNotFoundException

logger = logging.getLogger("questify.leaderboard")


class LeaderboardService:
    """Service for leaderboards, monthly history and profile stats"""

    def __init__(
        self,
        db: Session,
        date_service: Optional[DateService] = None,
        text_generator: Optional[TextGenerator] = None
    ):
        self.db = db
        self.date_service = date_service or DateService()
        self.text_generator = text_generator or TextGenerator()
        self.user_repo = UserRepository()
        self.goal_repo = GoalRepository()
        self.completion_repo = CompletionRepository()
        self.monthly_repo = MonthlyLeaderboardRepository()
        self.history_repo = LeaderboardHistoryRepository()
        self.badge_repo = BadgeRepository()
        self.friendship_repo = FriendshipRepository()

    def _get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def _monthly_rank(self, points: int) -> int:
        return self.monthly_repo.count_with_more_points(self.db, points) + 1

    def current_leaderboard(self, user_id: Optional[int] = None) -> dict:
        """
        Get this month's top entries and, optionally, the caller's standing.

        A caller without a monthly entry gets one created at 0 points and is
        reported with rank 0.

        Returns:
            {"month", "year", "leaderboard": [...], "user_rank": {rank, points} | None}
        """
        today = self.date_service.today()

        leaderboard = [
            {
                "rank": rank,
                "user_id": entry.user_id,
                "username": entry.user.username,
                "points": entry.points,
            }
            for rank, entry in enumerate(
                self.monthly_repo.get_ranked(self.db, LEADERBOARD_TOP_SIZE), start=1
            )
        ]

        user_rank = None
        if user_id is not None:
            self._get_user(user_id)
            entry = self.monthly_repo.get_by_user(self.db, user_id)
            if entry is None:
                with ledger_transaction(self.db, "create leaderboard entry"):
                    self.monthly_repo.create(self.db, user_id, 0)
                logger.info(f"Created monthly leaderboard entry for user {user_id}")
                user_rank = {"rank": 0, "points": 0}
            else:
                user_rank = {"rank": self._monthly_rank(entry.points), "points": entry.points}

        return {
            "month": today.month,
            "year": today.year,
            "leaderboard": leaderboard,
            "user_rank": user_rank,
        }

    def all_time_leaderboard(self) -> List[dict]:
        """Get the top users by lifetime points"""
        return [
            {
                "rank": rank,
                "user_id": user.id,
                "username": user.username,
                "total_points": user.total_points,
                "longest_streak": user.longest_streak,
            }
            for rank, user in enumerate(
                self.user_repo.get_top_by_total_points(self.db, LEADERBOARD_TOP_SIZE), start=1
            )
        ]

    def leaderboard_history(self, user_id: int) -> List[dict]:
        """Get a user's archived monthly results, newest first"""
        self._get_user(user_id)
        return [
            {
                "month": row.month,
                "year": row.year,
                "final_points": row.final_points,
                "rank": row.rank,
            }
            for row in self.history_repo.get_for_user(self.db, user_id, LEADERBOARD_HISTORY_MONTHS)
        ]

    def user_stats(self, user_id: int) -> dict:
        """Get profile totals and the current monthly rank"""
        user = self._get_user(user_id)
        entry = self.monthly_repo.get_by_user(self.db, user_id)

        return {
            "user": {
                "id": user.id,
                "username": user.username,
                "total_points": user.total_points,
                "current_streak": user.current_streak,
                "longest_streak": user.longest_streak,
                "created_at": user.created_at,
            },
            "stats": {
                "total_tasks": self.completion_repo.count_for_user(self.db, user_id),
                "total_goals": self.goal_repo.count_for_user(self.db, user_id),
                "completed_goals": self.completion_repo.count_distinct_goals_for_user(
                    self.db, user_id
                ),
                "friend_count": self.friendship_repo.count_for_user(self.db, user_id),
                "badge_count": self.badge_repo.count_for_user(self.db, user_id),
                "monthly_points": entry.points if entry else 0,
                # Users without an entry this month are ranked first
                "current_rank": self._monthly_rank(entry.points) if entry else 1,
            },
        }

    def dashboard_quote(self) -> str:
        return self.text_generator.generate(MESSAGE_DASHBOARD_QUOTE)
