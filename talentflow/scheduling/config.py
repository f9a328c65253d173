"""
Scheduling configuration module.

Calendar constants shared by the calendar engine, the schedule builder and
the backfill job.
"""
from typing import FrozenSet


class SchedulingConfig:
    """
    Configuration for business-day calculations.

    Weekdays follow date.weekday(): Monday=0 ... Sunday=6.
    """

    # Every stage occupies at least one business day, even with an SLA of 0
    MIN_SLA_DAYS: int = 1

    WEEKEND_DAYS: FrozenSet[int] = frozenset({5, 6})

    # Boundary representation of every date value
    DATE_FORMAT: str = "%Y-%m-%d"

    @classmethod
    def normalize_sla(cls, sla_days) -> int:
        """
        Clamp an SLA to the minimum the calendar engine accepts.

        Args:
            sla_days: SLA in business days (None is treated as 0)

        Returns:
            int: max(MIN_SLA_DAYS, sla_days)
        """
        if sla_days is None:
            return cls.MIN_SLA_DAYS
        return max(cls.MIN_SLA_DAYS, int(sla_days))

    @classmethod
    def is_weekend(cls, weekday: int) -> bool:
        return weekday in cls.WEEKEND_DAYS
