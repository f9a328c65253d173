"""
Business-day scheduling.

Pure calendar arithmetic and schedule building, with no database access.
"""
from talentflow.scheduling.builder import PlannedStage, Schedule, StageTemplate, build_schedule
from talentflow.scheduling.calendar import (
    BusinessDayWindow,
    add_business_days_inclusive,
    count_business_days_inclusive,
    is_working_day,
    list_business_days_after,
    list_business_days_inclusive,
    list_dates_inclusive,
)
from talentflow.scheduling.config import SchedulingConfig

__all__ = [
    "BusinessDayWindow",
    "PlannedStage",
    "Schedule",
    "SchedulingConfig",
    "StageTemplate",
    "add_business_days_inclusive",
    "build_schedule",
    "count_business_days_inclusive",
    "is_working_day",
    "list_business_days_after",
    "list_business_days_inclusive",
    "list_dates_inclusive",
]
