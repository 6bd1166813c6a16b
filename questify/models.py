from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, UniqueConstraint, Text
)
from sqlalchemy.orm import relationship
from datetime import datetime

from questify.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=False, unique=True)

    # Lifetime points (not clamped on refund)
    total_points = Column(Integer, nullable=False, default=0)

    # Streak tracking
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=datetime.now)

    goals = relationship(
        "Goal", back_populates="user", cascade="all, delete-orphan"
    )


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)  # fitness, learning, personal...
    frequency = Column(String, nullable=False)  # daily, weekly
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    user = relationship("User", back_populates="goals")
    completions = relationship(
        "Completion", back_populates="goal", cascade="all, delete-orphan"
    )
    nudges = relationship(
        "Nudge", back_populates="goal", cascade="all, delete-orphan"
    )


class Completion(Base):
    __tablename__ = "task_completions"
    __table_args__ = (
        UniqueConstraint("goal_id", "user_id", "period_key", name="uq_completion_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    completed_date = Column(Date, nullable=False)  # Day the action was recorded
    period_key = Column(Date, nullable=False)  # Day (daily) or week-start Sunday (weekly)
    points_earned = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    goal = relationship("Goal", back_populates="completions")


class MonthlyLeaderboardEntry(Base):
    __tablename__ = "monthly_leaderboard"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    points = Column(Integer, nullable=False, default=0)
    last_updated = Column(DateTime, default=datetime.now)

    user = relationship("User")


class LeaderboardHistoryEntry(Base):
    __tablename__ = "leaderboard_history"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_history_user_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    final_points = Column(Integer, nullable=False, default=0)
    rank = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class LeaderboardRollover(Base):
    """One row per month whose standings have been archived and reset"""
    __tablename__ = "leaderboard_rollovers"
    __table_args__ = (
        UniqueConstraint("month", "year", name="uq_rollover_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    archived_count = Column(Integer, nullable=False, default=0)
    winner_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    executed_at = Column(DateTime, default=datetime.now)


class Badge(Base):
    __tablename__ = "badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_type", name="uq_badge_user_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_type = Column(String, nullable=False)
    unlocked_at = Column(DateTime, default=datetime.now)


class Friendship(Base):
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="uq_friendship_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    friend_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class Nudge(Base):
    __tablename__ = "nudges"

    id = Column(Integer, primary_key=True, index=True)
    from_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    to_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    ai_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    sender = relationship("User", foreign_keys=[from_user_id])
    goal = relationship("Goal", back_populates="nudges")
