"""
Badge evaluation service.
Grants achievement badges the first time a user's counters cross a rule's
threshold. Leaderboard King/Queen is granted only by the monthly rollover.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List
from sqlalchemy.orm import Session

from questify.models import User
from questify.repositories.badge_repository import BadgeRepository
from questify.repositories.goal_repository import CompletionRepository
from questify.repositories.social_repository import FriendshipRepository, NudgeRepository
from questify.constants import (
    BADGE_FIRST_STEPS,
    BADGE_WEEK_WARRIOR,
    BADGE_MONTHLY_MASTER,
    BADGE_GOAL_CRUSHER,
    BADGE_SOCIAL_BUTTERFLY,
    BADGE_HELPING_HAND,
    BADGE_COMEBACK_KID,
    FIRST_STEPS_TASKS,
    WEEK_WARRIOR_STREAK,
    MONTHLY_MASTER_STREAK,
    GOAL_CRUSHER_GOALS,
    SOCIAL_BUTTERFLY_FRIENDS,
    HELPING_HAND_NUDGES,
    COMEBACK_KID_STREAK,
)

logger = logging.getLogger("questify.badges")


@dataclass(frozen=True)
class BadgeCounters:
    """Snapshot of the counters badge rules are evaluated against"""
    completed_tasks: int = 0
    distinct_completed_goals: int = 0
    friend_count: int = 0
    nudges_sent: int = 0
    current_streak: int = 0
    longest_streak: int = 0


# Badge type -> predicate over a counters snapshot
BADGE_RULES: Dict[str, Callable[[BadgeCounters], bool]] = {
    BADGE_FIRST_STEPS: lambda c: c.completed_tasks >= FIRST_STEPS_TASKS,
    BADGE_WEEK_WARRIOR: lambda c: c.current_streak >= WEEK_WARRIOR_STREAK,
    BADGE_MONTHLY_MASTER: lambda c: c.current_streak >= MONTHLY_MASTER_STREAK,
    BADGE_GOAL_CRUSHER: lambda c: c.distinct_completed_goals >= GOAL_CRUSHER_GOALS,
    BADGE_SOCIAL_BUTTERFLY: lambda c: c.friend_count >= SOCIAL_BUTTERFLY_FRIENDS,
    BADGE_HELPING_HAND: lambda c: c.nudges_sent >= HELPING_HAND_NUDGES,
    BADGE_COMEBACK_KID: lambda c: (
        c.longest_streak > c.current_streak and c.current_streak >= COMEBACK_KID_STREAK
    ),
}


def unlockable_badges(counters: BadgeCounters, held: Iterable[str]) -> List[str]:
    """
    Get badge types whose rule passes and that are not already held.

    Every rule reads the same snapshot, so the result does not depend on
    rule order.
    """
    held = set(held)
    return [
        badge_type
        for badge_type, rule in BADGE_RULES.items()
        if badge_type not in held and rule(counters)
    ]


class BadgeEvaluator:
    """Service for badge evaluation and lookup"""

    def __init__(self, db: Session):
        self.db = db
        self.badge_repo = BadgeRepository()
        self.completion_repo = CompletionRepository()
        self.friendship_repo = FriendshipRepository()
        self.nudge_repo = NudgeRepository()

    def collect_counters(self, user: User) -> BadgeCounters:
        """Read the derived counters for a user"""
        return BadgeCounters(
            completed_tasks=self.completion_repo.count_for_user(self.db, user.id),
            distinct_completed_goals=self.completion_repo.count_distinct_goals_for_user(
                self.db, user.id
            ),
            friend_count=self.friendship_repo.count_for_user(self.db, user.id),
            nudges_sent=self.nudge_repo.count_sent_by(self.db, user.id),
            current_streak=user.current_streak or 0,
            longest_streak=user.longest_streak or 0,
        )

    def evaluate(self, user: User) -> List[str]:
        """
        Grant every badge the user newly qualifies for.

        Args:
            user: User entity with up-to-date streak values

        Returns:
            Badge types granted by this call (empty if nothing new)
        """
        counters = self.collect_counters(user)
        held = self.badge_repo.get_types_for_user(self.db, user.id)

        granted = unlockable_badges(counters, held)
        for badge_type in granted:
            self.badge_repo.grant(self.db, user.id, badge_type)

        if granted:
            logger.info(f"User {user.id} unlocked badges: {granted}")
        return granted

    def get_user_badges(self, user_id: int) -> List[dict]:
        """Get all badges for a user, most recent first"""
        return [
            {"badge_type": badge.badge_type, "unlocked_at": badge.unlocked_at}
            for badge in self.badge_repo.get_for_user(self.db, user_id)
        ]
