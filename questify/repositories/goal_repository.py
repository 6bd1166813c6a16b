"""
Goal repository - Data access layer for goals and their completions.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from questify.models import Goal, Completion


class GoalRepository:
    """Repository for Goal data access"""

    @staticmethod
    def get_owned(db: Session, goal_id: int, user_id: int) -> Optional[Goal]:
        """Get goal by ID only if it belongs to user_id"""
        return db.query(Goal).filter(
            and_(Goal.id == goal_id, Goal.user_id == user_id)
        ).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[Goal]:
        """Get all goals of a user, newest first"""
        return db.query(Goal).filter(
            Goal.user_id == user_id
        ).order_by(Goal.created_at.desc(), Goal.id.desc()).all()

    @staticmethod
    def get_for_users(db: Session, user_ids: List[int]) -> List[Goal]:
        """Get goals of any of user_ids, newest first"""
        if not user_ids:
            return []
        return db.query(Goal).filter(
            Goal.user_id.in_(user_ids)
        ).order_by(Goal.created_at.desc(), Goal.id.desc()).all()

    @staticmethod
    def get_with_deadline(db: Session, user_id: int) -> List[Goal]:
        """Get user's goals that have a deadline"""
        return db.query(Goal).filter(
            and_(Goal.user_id == user_id, Goal.deadline.is_not(None))
        ).order_by(Goal.id).all()

    @staticmethod
    def count_by_frequency(db: Session, user_id: int, frequency: str) -> int:
        return db.query(Goal).filter(
            and_(Goal.user_id == user_id, Goal.frequency == frequency)
        ).count()

    @staticmethod
    def count_for_user(db: Session, user_id: int) -> int:
        return db.query(Goal).filter(Goal.user_id == user_id).count()

    @staticmethod
    def create(db: Session, goal: Goal) -> Goal:
        """Add a new goal (flushed, not committed)"""
        db.add(goal)
        db.flush()
        return goal

    @staticmethod
    def delete(db: Session, goal: Goal) -> None:
        """Delete a goal; completions and nudges cascade"""
        db.delete(goal)
        db.flush()


class CompletionRepository:
    """Repository for Completion data access"""

    @staticmethod
    def get_for_period(
        db: Session,
        goal_id: int,
        user_id: int,
        period_key: date
    ) -> Optional[Completion]:
        """Get the completion for a (goal, user, period), if any"""
        return db.query(Completion).filter(
            and_(
                Completion.goal_id == goal_id,
                Completion.user_id == user_id,
                Completion.period_key == period_key
            )
        ).first()

    @staticmethod
    def create(db: Session, completion: Completion) -> Completion:
        """Insert a completion; the unique constraint rejects duplicates on flush"""
        db.add(completion)
        db.flush()
        return completion

    @staticmethod
    def count_for_goal(db: Session, goal_id: int) -> int:
        """Count all completions recorded for a goal"""
        return db.query(Completion).filter(Completion.goal_id == goal_id).count()

    @staticmethod
    def count_for_user(db: Session, user_id: int) -> int:
        """Count all completions recorded by a user"""
        return db.query(Completion).filter(Completion.user_id == user_id).count()

    @staticmethod
    def count_distinct_goals_for_user(db: Session, user_id: int) -> int:
        """Count distinct goals the user has completed at least once"""
        return db.query(func.count(func.distinct(Completion.goal_id))).filter(
            Completion.user_id == user_id
        ).scalar() or 0

    @staticmethod
    def count_goals_completed_in_period(
        db: Session,
        user_id: int,
        frequency: str,
        period_key: date
    ) -> int:
        """Count distinct goals of a frequency completed for the given period"""
        return db.query(func.count(func.distinct(Completion.goal_id))).select_from(
            Completion
        ).join(
            Goal, Completion.goal_id == Goal.id
        ).filter(
            and_(
                Completion.user_id == user_id,
                Goal.frequency == frequency,
                Completion.period_key == period_key
            )
        ).scalar() or 0

    @staticmethod
    def get_recent_for_users(db: Session, user_ids: List[int], limit: int) -> List[Completion]:
        """Get most recent completions recorded by any of user_ids"""
        if not user_ids:
            return []
        return db.query(Completion).filter(
            Completion.user_id.in_(user_ids)
        ).order_by(Completion.created_at.desc(), Completion.id.desc()).limit(limit).all()
