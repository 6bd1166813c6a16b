"""
Gamification service.
Orchestrates task completion, goal deletion and the scheduled jobs, and owns
the transaction boundary of every ledger operation.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from questify.models import User, Goal
from questify.repositories.user_repository import UserRepository
from questify.repositories.goal_repository import GoalRepository
from questify.repositories.leaderboard_repository import MonthlyLeaderboardRepository
from questify.services.date_service import DateService
from questify.services.completion_ledger import CompletionLedger
from questify.services.points_service import PointsAccountant
from questify.services.streak_service import StreakTracker
from questify.services.badge_service import BadgeEvaluator
from questify.services.progress_service import ProgressAnalyzer
from questify.services.rollover_service import MonthlyRollover
from questify.services.text_generation import TextGenerator
from questify.services.transaction import ledger_transaction
from questify.constants import GOAL_FREQUENCIES, MESSAGE_COMPLETION, MESSAGE_BADGE_UNLOCK
from questify.exceptions import (
    DuplicateCompletionException,
    GoalNotFoundException,
    InconsistentRefundException,
    UserNotFoundException,
    ValidationException,
)

logger = logging.getLogger("questify.gamification")


class GamificationService:
    """Service for the gamification ledger operations"""

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
        self.monthly_repo = MonthlyLeaderboardRepository()
        self.ledger = CompletionLedger(db)
        self.points = PointsAccountant(db)
        self.badges = BadgeEvaluator(db)

    def _get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def _lock_user(self, user_id: int) -> User:
        user = self.user_repo.get_for_update(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def _get_owned_goal(self, goal_id: int, user_id: int) -> Goal:
        goal = self.goal_repo.get_owned(self.db, goal_id, user_id)
        if not goal:
            raise GoalNotFoundException(goal_id, user_id)
        return goal

    # ----------------------------------------------------------------- users

    def register_user(self, username: str, email: str) -> User:
        """
        Create a user with zeroed counters and an empty monthly entry.

        Raises:
            ValidationException: If the username or email is taken
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username:
            raise ValidationException("username", "username is required")
        if not email:
            raise ValidationException("email", "email is required")

        with ledger_transaction(self.db, "register user"):
            if self.user_repo.get_by_username(self.db, username):
                raise ValidationException("username", f"username '{username}' is already taken")
            if self.user_repo.get_by_email(self.db, email):
                raise ValidationException("email", f"email '{email}' is already registered")

            user = self.user_repo.create(self.db, User(
                username=username,
                email=email,
                total_points=0,
                current_streak=0,
                longest_streak=0
            ))
            self.monthly_repo.create(self.db, user.id, 0)

        self.db.refresh(user)
        logger.info(f"Registered user {user.id} ({username})")
        return user

    def get_user(self, user_id: int) -> User:
        return self._get_user(user_id)

    # ----------------------------------------------------------------- goals

    def create_goal(
        self,
        user_id: int,
        title: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        frequency: str = "daily",
        deadline: Optional[date] = None
    ) -> Goal:
        """
        Create a goal for a user.

        Raises:
            UserNotFoundException: If the user does not exist
            ValidationException: If the title is empty or frequency unknown
        """
        title = (title or "").strip()
        if not title:
            raise ValidationException("title", "title is required")
        if frequency not in GOAL_FREQUENCIES:
            raise ValidationException("frequency", f"frequency must be one of {list(GOAL_FREQUENCIES)}")

        with ledger_transaction(self.db, "create goal"):
            self._get_user(user_id)
            goal = self.goal_repo.create(self.db, Goal(
                user_id=user_id,
                title=title,
                description=description,
                category=category,
                frequency=frequency,
                deadline=deadline
            ))

        self.db.refresh(goal)
        return goal

    def get_goals(self, user_id: int) -> List[Goal]:
        """Get a user's goals, newest first"""
        self._get_user(user_id)
        return self.goal_repo.get_for_user(self.db, user_id)

    # ------------------------------------------------------------ completion

    def complete_task(self, goal_id: int, user_id: int, frequency: Optional[str] = None) -> dict:
        """
        Record today's completion of a goal and apply its rewards.

        Completion, points, streak and badges are written in one transaction;
        messages are generated only after it commits.

        Args:
            goal_id: Goal being completed
            user_id: Owner of the goal
            frequency: Optional frequency sent by the caller; must match the goal

        Returns:
            {points_earned, new_streak, badges_unlocked: [{badge, message}], message}

        Raises:
            UserNotFoundException, GoalNotFoundException: Unknown user or goal
            DuplicateCompletionException: If this period is already completed
            LedgerOperationException: If the store fails
        """
        today = self.date_service.today()

        try:
            with ledger_transaction(self.db, "complete task"):
                user = self._lock_user(user_id)
                goal = self._get_owned_goal(goal_id, user_id)
                if frequency is not None and frequency != goal.frequency:
                    raise ValidationException(
                        "frequency",
                        f"goal {goal_id} is {goal.frequency}, not {frequency}"
                    )

                completion = self.ledger.record(goal.id, user.id, goal.frequency, today)
                points_earned = completion.points_earned
                self.points.apply_completion(user, points_earned)
                new_streak = StreakTracker.advance(user, today)
                self.db.flush()
                unlocked = self.badges.evaluate(user)
                goal_type = goal.category
        except DuplicateCompletionException as e:
            logger.info(str(e))
            raise

        logger.info(
            f"User {user_id} completed goal {goal_id}: +{points_earned} points, "
            f"streak {new_streak}"
        )

        return {
            "points_earned": points_earned,
            "new_streak": new_streak,
            "badges_unlocked": [
                {
                    "badge": badge_type,
                    "message": self.text_generator.generate(
                        MESSAGE_BADGE_UNLOCK, {"badge_name": badge_type}
                    ),
                }
                for badge_type in unlocked
            ],
            "message": self.text_generator.generate(
                MESSAGE_COMPLETION, {"goal_type": goal_type}
            ),
        }

    def delete_goal(self, goal_id: int, user_id: int) -> dict:
        """
        Delete a goal and refund every point it generated.

        The refund is the goal's completion count times its tariff. A refund
        larger than the user's lifetime total is logged and applied anyway.

        Returns:
            {"points_refunded": int}
        """
        with ledger_transaction(self.db, "delete goal"):
            user = self._lock_user(user_id)
            goal = self._get_owned_goal(goal_id, user_id)

            completions = self.ledger.count_for_goal(goal.id)
            points_refunded = completions * PointsAccountant.tariff(goal.frequency)

            try:
                self.points.check_refund(user, points_refunded)
            except InconsistentRefundException as e:
                logger.warning(f"{e}; refunding anyway")

            self.points.refund(user, points_refunded, since=goal.created_at)
            self.goal_repo.delete(self.db, goal)

        logger.info(f"Deleted goal {goal_id} of user {user_id}, refunded {points_refunded} points")
        return {"points_refunded": points_refunded}

    # ------------------------------------------------------------ read models

    def get_progress(self, user_id: int) -> dict:
        self._get_user(user_id)
        analyzer = ProgressAnalyzer(self.db, self.text_generator)
        return analyzer.progress(user_id, self.date_service.today())

    def get_failure_alerts(self, user_id: int) -> List[dict]:
        self._get_user(user_id)
        analyzer = ProgressAnalyzer(self.db, self.text_generator)
        return analyzer.failure_alerts(user_id, self.date_service.today())

    def get_streak(self, user_id: int) -> dict:
        return StreakTracker(self.db).get_streak(user_id)

    def get_badges(self, user_id: int) -> List[dict]:
        self._get_user(user_id)
        return self.badges.get_user_badges(user_id)

    # ---------------------------------------------------------- scheduled jobs

    def run_monthly_rollover(
        self,
        reference_date: Optional[date] = None,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> dict:
        """Archive the previous month's leaderboard and reset monthly points"""
        rollover = MonthlyRollover(self.db)
        return rollover.run(reference_date or self.date_service.today(), month, year)

    def run_daily_streak_decay(self) -> int:
        """Reset streaks of users inactive since before yesterday"""
        with ledger_transaction(self.db, "streak decay"):
            reset_count = StreakTracker(self.db).decay(self.date_service.today())
        return reset_count
