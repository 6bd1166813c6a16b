"""
Social service.
Friendships and nudges. Both feed badge counters, so every write here
re-evaluates the acting user's badges in the same transaction.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from questify.models import Nudge, User
from questify.repositories.user_repository import UserRepository
from questify.repositories.goal_repository import GoalRepository, CompletionRepository
from questify.repositories.social_repository import FriendshipRepository, NudgeRepository
from questify.services.date_service import DateService
from questify.services.completion_ledger import CompletionLedger
from questify.services.badge_service import BadgeEvaluator
from questify.services.text_generation import TextGenerator
from questify.services.transaction import ledger_transaction
from questify.constants import (
    FRIEND_FEED_SIZE,
    FRIEND_FEED_INCOMPLETE_SIZE,
    NUDGES_INBOX_SIZE,
    FREQUENCY_DAILY,
    MESSAGE_NUDGE,
)
from questify.exceptions import (
    GoalNotFoundException,
    NotFriendsException,
    UserNotFoundException,
    ValidationException,
)

logger = logging.getLogger("questify.social")


class SocialService:
    """Service for friends, the friend feed and nudges"""

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
        self.completion_repo = CompletionRepository()
        self.friendship_repo = FriendshipRepository()
        self.nudge_repo = NudgeRepository()
        self.ledger = CompletionLedger(db)
        self.badges = BadgeEvaluator(db)

    def _get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def add_friend(self, user_id: int, friend_username: str) -> dict:
        """
        Befriend a user by username, in both directions.

        Returns:
            {"friend_id": int, "badges_unlocked": [badge types]}

        Raises:
            UserNotFoundException: If either user does not exist
            ValidationException: Self-friending or an existing friendship
        """
        with ledger_transaction(self.db, "add friend"):
            user = self.user_repo.get_for_update(self.db, user_id)
            if not user:
                raise UserNotFoundException(user_id)

            friend = self.user_repo.get_by_username(self.db, friend_username)
            if not friend:
                raise UserNotFoundException(friend_username)
            if friend.id == user.id:
                raise ValidationException("friend_username", "cannot add yourself as a friend")
            if self.friendship_repo.get(self.db, user.id, friend.id):
                raise ValidationException("friend_username", f"already friends with {friend_username}")

            self.friendship_repo.create_pair(self.db, user.id, friend.id)
            unlocked = self.badges.evaluate(user)
            friend_id = friend.id

        logger.info(f"User {user_id} added friend {friend_id}")
        return {"friend_id": friend_id, "badges_unlocked": unlocked}

    def remove_friend(self, user_id: int, friend_id: int) -> dict:
        """Remove a friendship in both directions"""
        with ledger_transaction(self.db, "remove friend"):
            self._get_user(user_id)
            deleted = self.friendship_repo.delete_pair(self.db, user_id, friend_id)
            if deleted == 0:
                raise NotFriendsException(user_id, friend_id)

        logger.info(f"User {user_id} removed friend {friend_id}")
        return {"removed": True}

    def list_friends(self, user_id: int) -> List[dict]:
        self._get_user(user_id)
        return [
            {
                "id": friend.id,
                "username": friend.username,
                "total_points": friend.total_points,
                "current_streak": friend.current_streak,
                "longest_streak": friend.longest_streak,
            }
            for friend in self.friendship_repo.get_friends(self.db, user_id)
        ]

    def friend_feed(self, user_id: int, today: Optional[date] = None) -> dict:
        """
        Get friends' recent completions and their goals still open this period.

        Returns:
            {"feed": [...], "incomplete_goals": [...]}
        """
        self._get_user(user_id)
        today = today or self.date_service.today()

        friends = {friend.id: friend for friend in self.friendship_repo.get_friends(self.db, user_id)}
        friend_ids = list(friends)

        feed = []
        for completion in self.completion_repo.get_recent_for_users(
            self.db, friend_ids, FRIEND_FEED_SIZE
        ):
            goal = completion.goal
            feed.append({
                "id": completion.id,
                "completed_date": completion.completed_date,
                "points_earned": completion.points_earned,
                "created_at": completion.created_at,
                "friend_id": completion.user_id,
                "friend_username": friends[completion.user_id].username,
                "goal_id": goal.id,
                "goal_title": goal.title,
                "category": goal.category,
                "frequency": goal.frequency,
            })

        incomplete_goals = []
        for goal in self.goal_repo.get_for_users(self.db, friend_ids):
            if len(incomplete_goals) >= FRIEND_FEED_INCOMPLETE_SIZE:
                break
            if self.ledger.has_completed_period(goal.id, goal.user_id, goal.frequency, today):
                continue
            incomplete_goals.append({
                "goal_id": goal.id,
                "goal_title": goal.title,
                "category": goal.category,
                "frequency": goal.frequency,
                "friend_id": goal.user_id,
                "friend_username": friends[goal.user_id].username,
            })

        return {"feed": feed, "incomplete_goals": incomplete_goals}

    def send_nudge(
        self,
        from_user_id: int,
        to_user_id: int,
        goal_id: int,
        today: Optional[date] = None
    ) -> dict:
        """
        Nudge a friend about a goal they have not completed this period.

        The message is generated before the transaction opens so no row lock
        is held across the network call.

        Returns:
            {"nudge_id", "message", "badges_unlocked"}

        Raises:
            NotFriendsException: If the users are not friends
            GoalNotFoundException: If the goal is not the recipient's
            ValidationException: If the goal is already done this period
        """
        today = today or self.date_service.today()

        sender = self._get_user(from_user_id)
        if not self.friendship_repo.get(self.db, from_user_id, to_user_id):
            raise NotFriendsException(from_user_id, to_user_id)

        goal = self.goal_repo.get_owned(self.db, goal_id, to_user_id)
        if not goal:
            raise GoalNotFoundException(goal_id, to_user_id)

        if self.ledger.has_completed_period(goal.id, to_user_id, goal.frequency, today):
            period = "today" if goal.frequency == FREQUENCY_DAILY else "this week"
            raise ValidationException("goal_id", f"goal already completed {period}")

        message = self.text_generator.generate(
            MESSAGE_NUDGE, {"goal_title": goal.title, "goal_type": goal.category}
        )

        with ledger_transaction(self.db, "send nudge"):
            sender = self.user_repo.get_for_update(self.db, sender.id)
            nudge = self.nudge_repo.create(self.db, Nudge(
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                goal_id=goal.id,
                ai_message=message
            ))
            unlocked = self.badges.evaluate(sender)
            nudge_id = nudge.id

        logger.info(f"User {from_user_id} nudged user {to_user_id} about goal {goal_id}")
        return {"nudge_id": nudge_id, "message": message, "badges_unlocked": unlocked}

    def get_nudges(self, user_id: int) -> List[dict]:
        """Get the most recent nudges a user received"""
        self._get_user(user_id)
        return [
            {
                "id": nudge.id,
                "from_user_id": nudge.from_user_id,
                "from_username": nudge.sender.username,
                "goal_id": nudge.goal_id,
                "goal_title": nudge.goal.title,
                "ai_message": nudge.ai_message,
                "created_at": nudge.created_at,
            }
            for nudge in self.nudge_repo.get_received(self.db, user_id, NUDGES_INBOX_SIZE)
        ]
