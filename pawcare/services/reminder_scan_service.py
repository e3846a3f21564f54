"""
Reminder Scan Service
One pass of the daily reminder job: vaccinations coming due get a single
reminder (guarded by their one-way flag), active events inside their own
lead time get a reminder on every pass until the date has gone by.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pawcare.errors import StoreError
from pawcare.models.health_models import Event, Vaccination
from pawcare.services.reminder_notification_service import ReminderNotificationService
from pawcare.services.reminder_rules import ReminderWindows, is_due_within, window_end

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    today: date
    vaccinations_notified: List[str] = field(default_factory=list)
    events_notified: List[str] = field(default_factory=list)
    failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'today': self.today.isoformat(),
            'vaccinations_notified': len(self.vaccinations_notified),
            'events_notified': len(self.events_notified),
            'failures': self.failures
        }


class ReminderScanService:
    def __init__(self, db_session: Session, notifier: ReminderNotificationService,
                 windows: Optional[ReminderWindows] = None):
        self.db = db_session
        self.notifier = notifier
        self.windows = windows or ReminderWindows()

    def run(self, today: Optional[date] = None) -> ScanResult:
        today = today or date.today()
        result = ScanResult(today=today)
        logger.info(f"🔍 Scanning reminders for {today.isoformat()}")

        self._scan_vaccinations(today, result)
        self._scan_events(today, result)

        logger.info(f"Reminder scan completed: {len(result.vaccinations_notified)} vaccinations, "
                    f"{len(result.events_notified)} events, {result.failures} failed")
        return result

    def _candidate_ids(self, query, what: str) -> List[str]:
        try:
            return [row[0] for row in query.all()]
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Could not load {what} for the reminder scan: {str(e)}")
            raise StoreError(f'Could not load {what}') from e

    # ==================== VACCINATIONS ====================

    def _scan_vaccinations(self, today: date, result: ScanResult) -> None:
        window = self.windows.lookahead_scan_days
        ids = self._candidate_ids(
            self.db.query(Vaccination.id)
            .filter(Vaccination.reminder_sent.is_(False),
                    Vaccination.next_due_date >= today,
                    Vaccination.next_due_date <= window_end(today, window))
            .order_by(Vaccination.next_due_date.asc()),
            'vaccinations'
        )

        for vaccination_id in ids:
            try:
                vaccination = self.db.get(Vaccination, vaccination_id)
                if vaccination is None or vaccination.reminder_sent:
                    continue
                if not is_due_within(today, vaccination.next_due_date, window):
                    continue
                self.notifier.send_vaccination_reminder(vaccination)
                vaccination.mark_reminder_sent()
                self.db.commit()
                result.vaccinations_notified.append(vaccination_id)
            except Exception as e:
                self.db.rollback()
                result.failures += 1
                logger.error(f"❌ Error processing vaccination {vaccination_id}: {str(e)}")

    # ==================== EVENTS ====================

    def _scan_events(self, today: date, result: ScanResult) -> None:
        ids = self._candidate_ids(
            self.db.query(Event.id)
            .filter(Event.is_active.is_(True), Event.event_date >= today)
            .order_by(Event.event_date.asc()),
            'events'
        )

        for event_id in ids:
            try:
                event = self.db.get(Event, event_id)
                if event is None:
                    continue
                # each event carries its own lead time
                if not is_due_within(today, event.event_date, event.reminder_days_before):
                    continue
                self.notifier.send_event_reminder(event)
                result.events_notified.append(event_id)
            except Exception as e:
                self.db.rollback()
                result.failures += 1
                logger.error(f"❌ Error processing event {event_id}: {str(e)}")
