"""
Leaderboard repository - Data access layer for monthly standings and history.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import and_, case, or_, update
from sqlalchemy.orm import Session

from questify.models import (
    MonthlyLeaderboardEntry, LeaderboardHistoryEntry, LeaderboardRollover, User
)


def _clamped_subtract(column, amount: int):
    """SQL expression for max(0, column - amount)"""
    return case((column > amount, column - amount), else_=0)


class MonthlyLeaderboardRepository:
    """Repository for MonthlyLeaderboardEntry data access"""

    @staticmethod
    def get_by_user(db: Session, user_id: int) -> Optional[MonthlyLeaderboardEntry]:
        return db.query(MonthlyLeaderboardEntry).filter(
            MonthlyLeaderboardEntry.user_id == user_id
        ).first()

    @staticmethod
    def create(db: Session, user_id: int, points: int = 0) -> MonthlyLeaderboardEntry:
        """Add a new entry (flushed, not committed)"""
        entry = MonthlyLeaderboardEntry(
            user_id=user_id, points=points, last_updated=datetime.now()
        )
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def add_points(db: Session, user_id: int, points: int) -> None:
        """Additive update: points = points + amount"""
        db.execute(
            update(MonthlyLeaderboardEntry)
            .where(MonthlyLeaderboardEntry.user_id == user_id)
            .values(
                points=MonthlyLeaderboardEntry.points + points,
                last_updated=datetime.now()
            )
            .execution_options(synchronize_session="fetch")
        )

    @staticmethod
    def subtract_points_floor_zero(db: Session, user_id: int, points: int) -> int:
        """Subtract points, never going below zero. Returns rows affected."""
        result = db.execute(
            update(MonthlyLeaderboardEntry)
            .where(MonthlyLeaderboardEntry.user_id == user_id)
            .values(
                points=_clamped_subtract(MonthlyLeaderboardEntry.points, points),
                last_updated=datetime.now()
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    def get_ranked(db: Session, limit: Optional[int] = None) -> List[MonthlyLeaderboardEntry]:
        """
        Get entries with points > 0 in rank order.

        Ties are broken by earlier account creation, then lower user ID.
        """
        query = db.query(MonthlyLeaderboardEntry).join(
            User, MonthlyLeaderboardEntry.user_id == User.id
        ).filter(
            MonthlyLeaderboardEntry.points > 0
        ).order_by(
            MonthlyLeaderboardEntry.points.desc(), User.created_at, User.id
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def count_with_more_points(db: Session, points: int) -> int:
        return db.query(MonthlyLeaderboardEntry).filter(
            MonthlyLeaderboardEntry.points > points
        ).count()

    @staticmethod
    def reset_all(db: Session) -> int:
        """Zero every entry. Returns rows affected."""
        result = db.execute(
            update(MonthlyLeaderboardEntry)
            .values(points=0, last_updated=datetime.now())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount


class LeaderboardHistoryRepository:
    """Repository for LeaderboardHistoryEntry data access"""

    @staticmethod
    def exists_for_month(db: Session, month: int, year: int) -> bool:
        """True if any user has already been archived for (month, year)"""
        return db.query(LeaderboardHistoryEntry).filter(
            and_(
                LeaderboardHistoryEntry.month == month,
                LeaderboardHistoryEntry.year == year
            )
        ).first() is not None

    @staticmethod
    def get_for_user(db: Session, user_id: int, limit: int) -> List[LeaderboardHistoryEntry]:
        """Get a user's history rows, newest month first"""
        return db.query(LeaderboardHistoryEntry).filter(
            LeaderboardHistoryEntry.user_id == user_id
        ).order_by(
            LeaderboardHistoryEntry.year.desc(), LeaderboardHistoryEntry.month.desc()
        ).limit(limit).all()

    @staticmethod
    def create(db: Session, entry: LeaderboardHistoryEntry) -> LeaderboardHistoryEntry:
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def subtract_points_since(
        db: Session,
        user_id: int,
        points: int,
        month: int,
        year: int
    ) -> int:
        """
        Subtract points (floored at zero) from every history row of the user
        for (month, year) or any later month. Returns rows affected.
        """
        result = db.execute(
            update(LeaderboardHistoryEntry)
            .where(
                and_(
                    LeaderboardHistoryEntry.user_id == user_id,
                    or_(
                        LeaderboardHistoryEntry.year > year,
                        and_(
                            LeaderboardHistoryEntry.year == year,
                            LeaderboardHistoryEntry.month >= month
                        )
                    )
                )
            )
            .values(final_points=_clamped_subtract(LeaderboardHistoryEntry.final_points, points))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount


class LeaderboardRolloverRepository:
    """Repository for LeaderboardRollover data access"""

    @staticmethod
    def get(db: Session, month: int, year: int) -> Optional[LeaderboardRollover]:
        return db.query(LeaderboardRollover).filter(
            and_(LeaderboardRollover.month == month, LeaderboardRollover.year == year)
        ).first()

    @staticmethod
    def create(db: Session, rollover: LeaderboardRollover) -> LeaderboardRollover:
        """Record a finished rollover; the unique constraint rejects a second one on flush"""
        db.add(rollover)
        db.flush()
        return rollover
