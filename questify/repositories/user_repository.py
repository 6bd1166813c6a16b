"""
User repository - Data access layer for User model.
Handles all database queries related to users.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import and_, update
from sqlalchemy.orm import Session

from questify.models import User


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_for_update(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID, locking the row for the rest of the transaction"""
        return db.query(User).filter(User.id == user_id).with_for_update().first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[User]:
        """Get user by username"""
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_top_by_total_points(db: Session, limit: int) -> List[User]:
        """Get users with the highest lifetime points"""
        return db.query(User).order_by(
            User.total_points.desc(), User.created_at, User.id
        ).limit(limit).all()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """Add a new user (flushed, not committed)"""
        db.add(user)
        db.flush()
        return user

    @staticmethod
    def reset_stale_streaks(db: Session, before_date: date) -> int:
        """
        Zero current_streak for users whose last activity is before before_date.

        Returns:
            Number of users whose streak was reset
        """
        result = db.execute(
            update(User)
            .where(
                and_(
                    User.last_activity_date.is_not(None),
                    User.last_activity_date < before_date,
                    User.current_streak > 0,
                )
            )
            .values(current_streak=0)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
