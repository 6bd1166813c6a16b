"""
Completion ledger.
Source of truth for whether a goal's current period is already satisfied.
"""
import logging
from datetime import date
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from questify.models import Completion
from questify.repositories.goal_repository import CompletionRepository
from questify.services.date_service import DateService
from questify.services.points_service import PointsAccountant
from questify.exceptions import DuplicateCompletionException

logger = logging.getLogger("questify.ledger")


class CompletionLedger:
    """Records one completion per (goal, user, period)"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CompletionRepository()

    def has_completed_period(
        self,
        goal_id: int,
        user_id: int,
        frequency: str,
        reference_date: date
    ) -> bool:
        """Check whether the period containing reference_date is already satisfied"""
        period_key = DateService.get_period_key(frequency, reference_date)
        return self.repo.get_for_period(self.db, goal_id, user_id, period_key) is not None

    def record(
        self,
        goal_id: int,
        user_id: int,
        frequency: str,
        reference_date: date
    ) -> Completion:
        """
        Record a completion for the period containing reference_date.

        The check below turns the common case into a clean rejection; the
        (goal_id, user_id, period_key) unique constraint settles concurrent
        writers that both pass it. On a constraint violation the session is
        rolled back, so this must run before any other write of the operation.

        Returns:
            The inserted completion (flushed, not committed)

        Raises:
            DuplicateCompletionException: If the period is already satisfied
        """
        period_key = DateService.get_period_key(frequency, reference_date)

        if self.repo.get_for_period(self.db, goal_id, user_id, period_key):
            raise DuplicateCompletionException(goal_id, user_id, period_key)

        completion = Completion(
            goal_id=goal_id,
            user_id=user_id,
            completed_date=reference_date,
            period_key=period_key,
            points_earned=PointsAccountant.tariff(frequency)
        )
        try:
            return self.repo.create(self.db, completion)
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Concurrent completion rejected for goal {goal_id}, period {period_key}")
            raise DuplicateCompletionException(goal_id, user_id, period_key)

    def count_for_goal(self, goal_id: int) -> int:
        """Count completions recorded for a goal (basis for refunds)"""
        return self.repo.count_for_goal(self.db, goal_id)
