"""
Progress and pacing analysis.
Computes daily/weekly completion ratios and flags deadline goals that are
falling behind a linear schedule.
"""
import math
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from questify.models import Goal
from questify.repositories.goal_repository import GoalRepository, CompletionRepository
from questify.services.date_service import DateService
from questify.services.text_generation import TextGenerator
from questify.constants import (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    FAILURE_ALERT_GAP_THRESHOLD,
    DAYS_PER_WEEK,
    MESSAGE_FAILURE_ALERT,
)

# Float slack so a gap of exactly the threshold still alerts
RATE_EPSILON = 1e-9


def to_percent(ratio: float) -> int:
    """Convert a ratio to a whole percentage, rounding halves up"""
    return int(math.floor(ratio * 100 + 0.5))


def completion_summary(completed: int, total: int) -> dict:
    """Build a {completed, total, percentage} block, clamping completed to total"""
    completed = min(completed, total)
    percentage = to_percent(completed / total) if total > 0 else 0
    return {"completed": completed, "total": total, "percentage": percentage}


class ProgressAnalyzer:
    """Service for progress bars and failure alerts"""

    def __init__(self, db: Session, text_generator: Optional[TextGenerator] = None):
        self.db = db
        self.goal_repo = GoalRepository()
        self.completion_repo = CompletionRepository()
        self.text_generator = text_generator or TextGenerator()

    def progress(self, user_id: int, today: date) -> dict:
        """
        Get today's daily and this week's weekly completion ratios.

        Args:
            user_id: User to report on
            today: Reference date

        Returns:
            {"daily": {...}, "weekly": {...}} with completed, total, percentage
        """
        week_start = DateService.get_week_start(today)
        periods = {FREQUENCY_DAILY: today, FREQUENCY_WEEKLY: week_start}

        result = {}
        for frequency, period_key in periods.items():
            total = self.goal_repo.count_by_frequency(self.db, user_id, frequency)
            completed = self.completion_repo.count_goals_completed_in_period(
                self.db, user_id, frequency, period_key
            )
            result[frequency] = completion_summary(completed, total)
        return result

    def pacing(self, goal: Goal, completed_tasks: int, today: date) -> Optional[dict]:
        """
        Compare a deadline goal's actual completion rate with a linear schedule.

        Returns:
            Pacing figures, or None if the goal has no deadline or it has passed
        """
        if goal.deadline is None or today >= goal.deadline:
            return None

        created_at = goal.created_at
        total_days = DateService.days_between(created_at, DateService.start_of_day(goal.deadline))
        days_passed = DateService.days_between(created_at, DateService.start_of_day(today))
        if total_days <= 0:
            return None

        expected_rate = days_passed / total_days
        if goal.frequency == FREQUENCY_DAILY:
            tasks_needed = total_days
        else:
            tasks_needed = math.ceil(total_days / DAYS_PER_WEEK)
        actual_rate = completed_tasks / tasks_needed if tasks_needed > 0 else 0

        return {
            "total_days": total_days,
            "days_passed": days_passed,
            "tasks_needed": tasks_needed,
            "expected_rate": expected_rate,
            "actual_rate": actual_rate,
        }

    def failure_alerts(self, user_id: int, today: date) -> List[dict]:
        """
        Get alerts for goals that are 20% or more behind their expected pace.

        Goals without a deadline, or whose deadline is today or earlier, are
        skipped.
        """
        alerts = []
        for goal in self.goal_repo.get_with_deadline(self.db, user_id):
            completed_tasks = self.completion_repo.count_for_goal(self.db, goal.id)
            pace = self.pacing(goal, completed_tasks, today)
            if pace is None:
                continue

            gap = pace["expected_rate"] - pace["actual_rate"]
            if gap < FAILURE_ALERT_GAP_THRESHOLD - RATE_EPSILON:
                continue

            alerts.append({
                "goal_id": goal.id,
                "goal_title": goal.title,
                "days_behind": math.ceil(gap * pace["total_days"] - RATE_EPSILON),
                "expected_completion": to_percent(pace["expected_rate"]),
                "actual_completion": to_percent(pace["actual_rate"]),
                "ai_message": self.text_generator.generate(
                    MESSAGE_FAILURE_ALERT, {"goal_type": goal.category}
                ),
            })
        return alerts
