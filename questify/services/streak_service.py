"""
Streak tracking service.
Advances, holds or resets a user's daily activity streak and runs the daily
decay sweep for users who stopped showing up.
"""
import logging
from datetime import date, timedelta
from sqlalchemy.orm import Session

from questify.models import User
from questify.repositories.user_repository import UserRepository
from questify.exceptions import UserNotFoundException

logger = logging.getLogger("questify.streaks")


class StreakTracker:
    """Service for streak state transitions"""

    def __init__(self, db: Session = None):
        self.db = db
        self.user_repo = UserRepository()

    @staticmethod
    def advance(user: User, today: date) -> int:
        """
        Apply today's activity to the user's streak.

        - No prior activity: streak starts at 1
        - Last activity yesterday: streak continues (+1)
        - Last activity today: already counted, nothing changes
        - Anything older: streak broken, restarts at 1

        longest_streak never drops below current_streak.

        Args:
            user: User entity (mutated in place)
            today: Reference date of the activity

        Returns:
            The resulting current streak
        """
        last_activity = user.last_activity_date
        current = user.current_streak or 0
        longest = user.longest_streak or 0

        if last_activity is None:
            user.current_streak = 1
            user.longest_streak = max(longest, 1)
            user.last_activity_date = today
        elif last_activity == today:
            return current
        elif last_activity == today - timedelta(days=1):
            user.current_streak = current + 1
            user.longest_streak = max(longest, user.current_streak)
            user.last_activity_date = today
        else:
            user.current_streak = 1
            user.last_activity_date = today

        return user.current_streak

    def decay(self, today: date) -> int:
        """
        Reset current_streak to 0 for users whose last activity is older
        than yesterday. longest_streak is left untouched.

        Returns:
            Number of streaks reset
        """
        yesterday = today - timedelta(days=1)
        reset_count = self.user_repo.reset_stale_streaks(self.db, yesterday)
        logger.info(f"Streak decay for {today}: {reset_count} streaks reset")
        return reset_count

    def get_streak(self, user_id: int) -> dict:
        """Get streak info for a user"""
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)

        return {
            "current_streak": user.current_streak,
            "longest_streak": user.longest_streak,
            "last_activity_date": user.last_activity_date,
        }
