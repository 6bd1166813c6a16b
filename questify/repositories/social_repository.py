"""
Social repository - Data access layer for friendships and nudges.
"""
from typing import List, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from questify.models import Friendship, Nudge, User


class FriendshipRepository:
    """Repository for Friendship data access"""

    @staticmethod
    def get(db: Session, user_id: int, friend_id: int) -> Optional[Friendship]:
        return db.query(Friendship).filter(
            and_(Friendship.user_id == user_id, Friendship.friend_id == friend_id)
        ).first()

    @staticmethod
    def get_friends(db: Session, user_id: int) -> List[User]:
        """Get the users a user is friends with, ordered by username"""
        return db.query(User).join(
            Friendship, Friendship.friend_id == User.id
        ).filter(
            Friendship.user_id == user_id
        ).order_by(User.username).all()

    @staticmethod
    def count_for_user(db: Session, user_id: int) -> int:
        return db.query(Friendship).filter(Friendship.user_id == user_id).count()

    @staticmethod
    def create_pair(db: Session, user_id: int, friend_id: int) -> None:
        """Store the friendship in both directions"""
        db.add(Friendship(user_id=user_id, friend_id=friend_id))
        db.add(Friendship(user_id=friend_id, friend_id=user_id))
        db.flush()

    @staticmethod
    def delete_pair(db: Session, user_id: int, friend_id: int) -> int:
        """Delete both directions. Returns rows deleted."""
        deleted = db.query(Friendship).filter(
            or_(
                and_(Friendship.user_id == user_id, Friendship.friend_id == friend_id),
                and_(Friendship.user_id == friend_id, Friendship.friend_id == user_id)
            )
        ).delete(synchronize_session=False)
        db.flush()
        return deleted


class NudgeRepository:
    """Repository for Nudge data access"""

    @staticmethod
    def create(db: Session, nudge: Nudge) -> Nudge:
        db.add(nudge)
        db.flush()
        return nudge

    @staticmethod
    def count_sent_by(db: Session, user_id: int) -> int:
        return db.query(Nudge).filter(Nudge.from_user_id == user_id).count()

    @staticmethod
    def get_received(db: Session, user_id: int, limit: int) -> List[Nudge]:
        return db.query(Nudge).filter(
            Nudge.to_user_id == user_id
        ).order_by(Nudge.created_at.desc(), Nudge.id.desc()).limit(limit).all()
