"""
Monthly leaderboard rollover.
Archives the finished month's standings into history, crowns the winner and
zeroes monthly points.
"""
import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from questify.models import LeaderboardHistoryEntry, LeaderboardRollover
from questify.repositories.leaderboard_repository import (
    MonthlyLeaderboardRepository,
    LeaderboardHistoryRepository,
    LeaderboardRolloverRepository,
)
from questify.repositories.badge_repository import BadgeRepository
from questify.services.date_service import DateService
from questify.constants import BADGE_LEADERBOARD_CHAMPION
from questify.services.transaction import ledger_transaction

logger = logging.getLogger("questify.rollover")


class MonthlyRollover:
    """Service for the monthly archive-and-reset job"""

    def __init__(self, db: Session):
        self.db = db
        self.monthly_repo = MonthlyLeaderboardRepository()
        self.history_repo = LeaderboardHistoryRepository()
        self.rollover_repo = LeaderboardRolloverRepository()
        self.badge_repo = BadgeRepository()

    def run(
        self,
        reference_date: date,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> dict:
        """
        Archive and reset the monthly leaderboard in one transaction.

        Steps:
        1. Stop if the month was already rolled over or has history rows
        2. Rank entries with points > 0 (points desc, earlier sign-up first)
        3. Insert one history row per ranked user
        4. Grant Leaderboard King/Queen to rank 1 if not already held
        5. Zero every monthly entry
        6. Record the rollover for the month

        A month that is already archived is left alone, so a retry after the
        new month has started neither re-crowns nor wipes new points.

        Args:
            reference_date: Day the job runs; the previous month is archived
            month, year: Explicit month to archive instead

        Returns:
            Dictionary with archived_count, month, year and winner_user_id

        Raises:
            LedgerOperationException: If the store fails; ambiguous only when
                the failure happened during commit
        """
        if month is None or year is None:
            month, year = DateService.get_previous_month(reference_date)

        with ledger_transaction(self.db, "monthly rollover"):
            if (
                self.rollover_repo.get(self.db, month, year)
                or self.history_repo.exists_for_month(self.db, month, year)
            ):
                logger.info(f"Monthly rollover for {year}-{month:02d} already done, skipping")
                return {
                    "archived_count": 0,
                    "month": month,
                    "year": year,
                    "winner_user_id": None,
                }

            ranked = self.monthly_repo.get_ranked(self.db)

            for rank, entry in enumerate(ranked, start=1):
                self.history_repo.create(self.db, LeaderboardHistoryEntry(
                    user_id=entry.user_id,
                    month=month,
                    year=year,
                    final_points=entry.points,
                    rank=rank
                ))
            archived_count = len(ranked)

            winner_user_id = ranked[0].user_id if ranked else None
            if winner_user_id is not None and not self.badge_repo.has_badge(
                self.db, winner_user_id, BADGE_LEADERBOARD_CHAMPION
            ):
                self.badge_repo.grant(self.db, winner_user_id, BADGE_LEADERBOARD_CHAMPION)

            self.monthly_repo.reset_all(self.db)
            self.rollover_repo.create(self.db, LeaderboardRollover(
                month=month,
                year=year,
                archived_count=archived_count,
                winner_user_id=winner_user_id
            ))

        logger.info(
            f"Monthly rollover for {year}-{month:02d} completed: "
            f"{archived_count} rankings archived, winner={winner_user_id}"
        )
        return {
            "archived_count": archived_count,
            "month": month,
            "year": year,
            "winner_user_id": winner_user_id,
        }
