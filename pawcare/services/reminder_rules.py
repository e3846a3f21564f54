"""
Reminder Rules
Due-date classification, reminder windows and anniversary roll-forward.

Everything here is pure date arithmetic on calendar dates; callers pass
``today`` explicitly so the rules never read the wall clock.
"""

import calendar
import enum
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from dateutil.relativedelta import relativedelta

from pawcare.errors import InvalidConfiguration

T = TypeVar('T')


class DueStatus(enum.Enum):
    OVERDUE = "overdue"
    DUE_WITHIN_WINDOW = "due_within_window"
    NOT_DUE = "not_due"
    NO_TARGET = "no_target"


@dataclass(frozen=True)
class ReminderWindows:
    """Look-ahead windows used across the app"""
    lookahead_scan_days: int = 7
    dashboard_events_days: int = 30
    dashboard_vaccination_months: int = 3
    reminder_summary_months: int = 1
    vaccination_event_lead_days: int = 14
    anniversary_lead_days: int = 7

    def __post_init__(self):
        for name in ('lookahead_scan_days', 'dashboard_events_days', 'dashboard_vaccination_months',
                     'reminder_summary_months', 'vaccination_event_lead_days', 'anniversary_lead_days'):
            _check_window(getattr(self, name))

    def dashboard_vaccination_days(self, today: date) -> int:
        """The ~90 day vaccination view, as a calendar-month span from today"""
        return months_to_days(today, self.dashboard_vaccination_months)

    def reminder_summary_days(self, today: date) -> int:
        return months_to_days(today, self.reminder_summary_months)


def _check_window(window_days) -> int:
    if isinstance(window_days, bool) or not isinstance(window_days, int):
        raise InvalidConfiguration(f"Window must be an integer number of days, got {window_days!r}")
    if window_days < 0:
        raise InvalidConfiguration(f"Window must not be negative, got {window_days}")
    return window_days


# ==================== CLASSIFICATION ====================

def window_end(today: date, window_days: int) -> date:
    """Last date (inclusive) of the window starting today"""
    return today + timedelta(days=_check_window(window_days))


def months_to_days(today: date, months: int) -> int:
    """Days between today and the same day ``months`` calendar months later"""
    _check_window(months)
    return ((today + relativedelta(months=months)) - today).days


def classify_due(today: date, target: Optional[date], window_days: int) -> DueStatus:
    """
    Classify a target date against the inclusive window [today, today + window_days].

    A missing target is never overdue.
    """
    end = window_end(today, window_days)
    if target is None:
        return DueStatus.NO_TARGET
    if target < today:
        return DueStatus.OVERDUE
    if target <= end:
        return DueStatus.DUE_WITHIN_WINDOW
    return DueStatus.NOT_DUE


def is_due_within(today: date, target: Optional[date], window_days: int) -> bool:
    return classify_due(today, target, window_days) is DueStatus.DUE_WITHIN_WINDOW


def partition_by_due(today: date, items: Iterable[T], key: Callable[[T], Optional[date]],
                     window_days: int) -> Dict[DueStatus, List[T]]:
    """Group items by their due status, keeping the input order inside each group"""
    groups = {status: [] for status in DueStatus}
    for item in items:
        groups[classify_due(today, key(item), window_days)].append(item)
    return groups


# ==================== ANNIVERSARIES ====================

def _on_year(source: date, year: int) -> date:
    day = source.day
    if source.month == 2 and day == 29 and not calendar.isleap(year):
        # Feb 29 anniversaries fall on Feb 28 in common years
        day = 28
    return date(year, source.month, day)


def next_anniversary(source: date, today: date) -> date:
    """
    This year's occurrence of source's month/day, or next year's if it
    already passed. The result is never before today.
    """
    occurrence = _on_year(source, today.year)
    if occurrence < today:
        occurrence = _on_year(source, today.year + 1)
    return occurrence


def age_in_years(date_of_birth: Optional[date], today: date) -> Optional[int]:
    if date_of_birth is None:
        return None
    return int((today - date_of_birth).days // 365.25)


def companion_source_key(dog_id: str, event_type: str, source_record_id: str) -> str:
    """Idempotency key for events generated from another record"""
    return f"{dog_id}:{event_type}:{source_record_id}"
