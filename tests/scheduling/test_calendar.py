"""
Tests for the business-day calendar.
These are pure functions, no app or database needed.
"""
from datetime import date, timedelta

import pytest

from talentflow.scheduling.calendar import (
    BusinessDayWindow,
    add_business_days_inclusive,
    count_business_days_inclusive,
    is_working_day,
    list_business_days_after,
    list_business_days_inclusive,
    list_dates_inclusive,
)
from conftest import FRI, MON, NEXT_MON, NEXT_TUE, NEXT_WED, SAT, SUN, THU, TUE, WED


class TestIsWorkingDay:

    def test_weekdays_are_working_days(self):
        for day in (MON, TUE, WED, THU, FRI):
            assert is_working_day(day, set()) is True

    def test_weekend_is_not_a_working_day(self):
        assert is_working_day(SAT, set()) is False
        assert is_working_day(SUN, set()) is False

    def test_holiday_is_not_a_working_day(self):
        assert is_working_day(WED, {WED}) is False

    def test_accepts_date_strings(self):
        assert is_working_day("2025-03-03", set()) is True


class TestAddBusinessDaysInclusive:

    def test_start_counts_as_day_one(self):
        window = add_business_days_inclusive(MON, 3, set())
        assert window == BusinessDayWindow(start=MON, end=WED, skipped_holidays=frozenset())

    def test_single_day_ends_on_start(self):
        window = add_business_days_inclusive(TUE, 1, set())
        assert window.start == TUE
        assert window.end == TUE

    def test_skips_weekend_while_counting(self):
        window = add_business_days_inclusive(THU, 3, set())
        assert window.end == NEXT_MON
        assert window.skipped_holidays == frozenset()

    def test_weekend_start_moves_to_monday(self):
        window = add_business_days_inclusive(SAT, 1, set())
        assert window.start == NEXT_MON
        assert window.end == NEXT_MON

    def test_holiday_start_moves_forward_and_is_recorded(self):
        window = add_business_days_inclusive(NEXT_MON, 2, {NEXT_MON})
        assert window.start == NEXT_TUE
        assert window.end == NEXT_WED
        assert window.skipped_holidays == frozenset({NEXT_MON})

    def test_holiday_on_weekend_start_is_recorded(self):
        window = add_business_days_inclusive(SAT, 1, {SAT})
        assert window.start == NEXT_MON
        assert window.skipped_holidays == frozenset({SAT})

    def test_holiday_inside_window_is_skipped_and_recorded(self):
        window = add_business_days_inclusive(MON, 3, {WED})
        assert window.start == MON
        assert window.end == THU
        assert window.skipped_holidays == frozenset({WED})

    def test_weekend_holiday_while_counting_is_not_recorded(self):
        window = add_business_days_inclusive(FRI, 2, {SAT})
        assert window.end == NEXT_MON
        assert window.skipped_holidays == frozenset()

    @pytest.mark.parametrize("n", [0, -3])
    def test_n_below_one_is_treated_as_one(self, n):
        window = add_business_days_inclusive(WED, n, set())
        assert window.start == WED
        assert window.end == WED

    def test_holidays_after_the_end_are_ignored(self):
        window = add_business_days_inclusive(MON, 2, {FRI})
        assert window.end == TUE
        assert window.skipped_holidays == frozenset()

    def test_end_is_a_business_day_and_count_matches_n(self):
        holidays = {WED, NEXT_MON, date(2025, 3, 19), date(2025, 3, 21)}
        for offset in range(14):
            start = MON + timedelta(days=offset)
            for n in range(1, 12):
                window = add_business_days_inclusive(start, n, holidays)
                assert is_working_day(window.end, holidays)
                assert count_business_days_inclusive(window.start, window.end, holidays) == n

    def test_is_deterministic(self):
        first = add_business_days_inclusive(THU, 4, {FRI})
        second = add_business_days_inclusive(THU, 4, {FRI})
        assert first == second


class TestBusinessDayEnumeration:

    def test_count_inclusive(self):
        assert count_business_days_inclusive(MON, NEXT_MON, set()) == 6

    def test_count_excludes_holidays(self):
        assert count_business_days_inclusive(MON, NEXT_MON, {WED}) == 5

    def test_count_is_zero_when_end_precedes_start(self):
        assert count_business_days_inclusive(FRI, MON, set()) == 0

    def test_list_inclusive(self):
        assert list_business_days_inclusive(THU, NEXT_MON, set()) == [THU, FRI, NEXT_MON]

    def test_list_after_excludes_the_start_day(self):
        assert list_business_days_after(MON, FRI, {WED}) == [TUE, THU, FRI]

    def test_list_dates_inclusive_keeps_weekends(self):
        assert list_dates_inclusive(FRI, NEXT_MON) == [FRI, SAT, SUN, NEXT_MON]

    def test_list_dates_empty_when_end_precedes_start(self):
        assert list_dates_inclusive(NEXT_MON, FRI) == []
