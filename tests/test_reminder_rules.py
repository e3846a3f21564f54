from datetime import date

import pytest

from pawcare.errors import InvalidConfiguration
from pawcare.services.reminder_rules import (
    DueStatus, ReminderWindows, age_in_years, classify_due, companion_source_key, is_due_within,
    months_to_days, next_anniversary, partition_by_due, window_end
)

TODAY = date(2024, 6, 10)


class TestClassifyDue:
    def test_missing_target_is_never_overdue(self):
        assert classify_due(TODAY, None, 7) is DueStatus.NO_TARGET

    def test_past_target_is_overdue(self):
        assert classify_due(TODAY, date(2024, 6, 9), 7) is DueStatus.OVERDUE

    def test_window_boundaries_are_inclusive(self):
        assert classify_due(TODAY, TODAY, 7) is DueStatus.DUE_WITHIN_WINDOW
        assert classify_due(TODAY, date(2024, 6, 17), 7) is DueStatus.DUE_WITHIN_WINDOW
        assert classify_due(TODAY, date(2024, 6, 18), 7) is DueStatus.NOT_DUE

    def test_zero_window_covers_only_today(self):
        assert is_due_within(TODAY, TODAY, 0)
        assert not is_due_within(TODAY, date(2024, 6, 11), 0)

    @pytest.mark.parametrize('window', [-1, 1.5, '7', True])
    def test_rejects_bad_windows(self, window):
        with pytest.raises(InvalidConfiguration):
            classify_due(TODAY, TODAY, window)


def test_window_end():
    assert window_end(TODAY, 30) == date(2024, 7, 10)


def test_months_to_days_follows_the_calendar():
    assert months_to_days(date(2024, 1, 31), 1) == 29
    assert months_to_days(date(2024, 6, 10), 3) == 92


def test_partition_keeps_input_order():
    items = [('b', date(2024, 6, 12)), ('a', date(2024, 6, 1)), ('c', None), ('d', date(2024, 6, 11))]
    groups = partition_by_due(TODAY, items, lambda item: item[1], 7)

    assert [name for name, _ in groups[DueStatus.DUE_WITHIN_WINDOW]] == ['b', 'd']
    assert [name for name, _ in groups[DueStatus.OVERDUE]] == ['a']
    assert [name for name, _ in groups[DueStatus.NO_TARGET]] == ['c']
    assert groups[DueStatus.NOT_DUE] == []


class TestNextAnniversary:
    def test_later_this_year(self):
        assert next_anniversary(date(2019, 8, 1), TODAY) == date(2024, 8, 1)

    def test_already_passed_rolls_to_next_year(self):
        assert next_anniversary(date(2019, 3, 1), TODAY) == date(2025, 3, 1)

    def test_today_is_not_rolled_forward(self):
        assert next_anniversary(date(2020, 6, 10), TODAY) == TODAY

    def test_leap_day_falls_on_feb_28_in_common_years(self):
        assert next_anniversary(date(2020, 2, 29), date(2023, 1, 5)) == date(2023, 2, 28)
        assert next_anniversary(date(2020, 2, 29), date(2024, 1, 5)) == date(2024, 2, 29)

    def test_never_before_today(self):
        for month in range(1, 13):
            assert next_anniversary(date(2018, month, 15), TODAY) >= TODAY


def test_age_in_years():
    assert age_in_years(None, TODAY) is None
    assert age_in_years(date(2024, 1, 1), TODAY) == 0
    assert age_in_years(date(2020, 6, 10), TODAY) == 4


def test_reminder_windows_defaults_and_validation():
    windows = ReminderWindows()
    assert windows.lookahead_scan_days == 7
    assert windows.dashboard_events_days == 30
    assert windows.dashboard_vaccination_days(date(2024, 1, 1)) == 91

    with pytest.raises(InvalidConfiguration):
        ReminderWindows(lookahead_scan_days=-3)


def test_companion_source_key():
    assert companion_source_key('dog-1', 'medication', 'med-9') == 'dog-1:medication:med-9'
