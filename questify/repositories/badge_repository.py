"""
Badge repository - Data access layer for Badge model.
"""
from datetime import datetime
from typing import List, Set
from sqlalchemy.orm import Session

from questify.models import Badge


class BadgeRepository:
    """Repository for Badge data access"""

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[Badge]:
        """Get all badges for a user, most recent first"""
        return db.query(Badge).filter(
            Badge.user_id == user_id
        ).order_by(Badge.unlocked_at.desc(), Badge.id.desc()).all()

    @staticmethod
    def get_types_for_user(db: Session, user_id: int) -> Set[str]:
        """Get the set of badge types a user already holds"""
        rows = db.query(Badge.badge_type).filter(Badge.user_id == user_id).all()
        return {row[0] for row in rows}

    @staticmethod
    def has_badge(db: Session, user_id: int, badge_type: str) -> bool:
        return db.query(Badge).filter(
            Badge.user_id == user_id, Badge.badge_type == badge_type
        ).first() is not None

    @staticmethod
    def count_for_user(db: Session, user_id: int) -> int:
        return db.query(Badge).filter(Badge.user_id == user_id).count()

    @staticmethod
    def grant(db: Session, user_id: int, badge_type: str) -> Badge:
        """Insert a badge; the (user_id, badge_type) unique constraint rejects duplicates"""
        badge = Badge(user_id=user_id, badge_type=badge_type, unlocked_at=datetime.now())
        db.add(badge)
        db.flush()
        return badge
