"""
Date calculation service.
Supplies the reference calendar day, week boundaries and completion periods.
"""
import math
from datetime import datetime, timedelta, date, time
from typing import Optional, Tuple

from questify.constants import FREQUENCY_DAILY, FREQUENCY_WEEKLY
from questify.exceptions import ValidationException


class DateService:
    """Service for date-related operations"""

    def __init__(self, reference_date: Optional[date] = None):
        # A fixed reference date pins "today" (scheduled jobs, tests)
        self.reference_date = reference_date

    def today(self) -> date:
        """Get the current reference date (day granularity)"""
        if self.reference_date is not None:
            return self.reference_date
        return date.today()

    def yesterday(self) -> date:
        return self.today() - timedelta(days=1)

    def start_of_week(self, reference_date: Optional[date] = None) -> date:
        return self.get_week_start(reference_date or self.today())

    @staticmethod
    def get_week_start(reference_date: date) -> date:
        """
        Get the Sunday that starts the week containing reference_date.

        Python's weekday() is Monday=0, so the Sunday-based index is
        (weekday + 1) % 7.
        """
        days_since_sunday = (reference_date.weekday() + 1) % 7
        return reference_date - timedelta(days=days_since_sunday)

    @staticmethod
    def get_period_key(frequency: str, reference_date: date) -> date:
        """
        Get the period key a completion on reference_date belongs to.

        Args:
            frequency: "daily" or "weekly"
            reference_date: Day the completion is recorded

        Returns:
            The date itself for daily goals, the week-start Sunday for weekly goals

        Raises:
            ValidationException: If frequency is unknown
        """
        if frequency == FREQUENCY_DAILY:
            return reference_date
        if frequency == FREQUENCY_WEEKLY:
            return DateService.get_week_start(reference_date)
        raise ValidationException("frequency", f"unknown frequency '{frequency}'")

    @staticmethod
    def get_previous_month(reference_date: date) -> Tuple[int, int]:
        """Get (month, year) of the calendar month before reference_date"""
        if reference_date.month == 1:
            return 12, reference_date.year - 1
        return reference_date.month - 1, reference_date.year

    @staticmethod
    def days_between(start: datetime, end: datetime) -> int:
        """Whole days from start to end, rounding partial days up"""
        return math.ceil((end - start).total_seconds() / 86400)

    @staticmethod
    def start_of_day(target_date: date) -> datetime:
        """Midnight at the beginning of target_date"""
        return datetime.combine(target_date, time.min)
