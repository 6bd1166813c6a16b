"""
Points accounting service.
Applies completion points and goal-deletion refunds to the three point
aggregates: lifetime total, monthly leaderboard entry and leaderboard history.
"""
import logging
from datetime import datetime
from sqlalchemy.orm import Session

from questify.models import User
from questify.repositories.leaderboard_repository import (
    MonthlyLeaderboardRepository, LeaderboardHistoryRepository
)
from questify.constants import (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    POINTS_DAILY_COMPLETION,
    POINTS_WEEKLY_COMPLETION,
)
from questify.exceptions import InconsistentRefundException, ValidationException

logger = logging.getLogger("questify.points")

TARIFF = {
    FREQUENCY_DAILY: POINTS_DAILY_COMPLETION,
    FREQUENCY_WEEKLY: POINTS_WEEKLY_COMPLETION,
}


class PointsAccountant:
    """Service for points calculation and management"""

    def __init__(self, db: Session):
        self.db = db
        self.monthly_repo = MonthlyLeaderboardRepository()
        self.history_repo = LeaderboardHistoryRepository()

    @staticmethod
    def tariff(frequency: str) -> int:
        """
        Get points for one completion of a goal with the given frequency.

        Raises:
            ValidationException: If frequency is unknown
        """
        try:
            return TARIFF[frequency]
        except KeyError:
            raise ValidationException("frequency", f"unknown frequency '{frequency}'")

    def apply_completion(self, user: User, points: int) -> None:
        """
        Add completion points to the user's lifetime total and monthly entry.

        The monthly entry is created at `points` if the user has none yet.

        Args:
            user: User row (locked by the caller)
            points: Points earned
        """
        user.total_points = (user.total_points or 0) + points

        entry = self.monthly_repo.get_by_user(self.db, user.id)
        if entry is None:
            self.monthly_repo.create(self.db, user.id, points)
        else:
            self.monthly_repo.add_points(self.db, user.id, points)

        self.db.flush()

    def check_refund(self, user: User, points: int) -> None:
        """
        Verify a refund is covered by the user's lifetime total.

        Raises:
            InconsistentRefundException: If the refund exceeds the balance
        """
        balance = user.total_points or 0
        if points > balance:
            raise InconsistentRefundException(user.id, points, balance)

    def refund(self, user: User, points: int, since: datetime) -> None:
        """
        Take back points generated by a deleted goal.

        The lifetime total is reduced as-is and may go negative. The monthly
        entry and every history row from the goal's creation month onwards are
        floored at zero.

        Args:
            user: User row (locked by the caller)
            points: Points to refund
            since: Creation time of the deleted goal
        """
        if points <= 0:
            return

        user.total_points = (user.total_points or 0) - points
        self.monthly_repo.subtract_points_floor_zero(self.db, user.id, points)
        history_rows = self.history_repo.subtract_points_since(
            self.db, user.id, points, since.month, since.year
        )
        self.db.flush()

        logger.info(
            f"Refunded {points} points from user {user.id} "
            f"({history_rows} history rows adjusted)"
        )
