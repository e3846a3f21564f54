"""
Reminder Notification Service
Delivery sink for reminders found by the daily scan. Only a log channel is
wired up; email and push delivery are not part of this service.
"""

import logging
from collections import deque
from typing import Deque, Optional, Tuple

from pawcare.models.health_models import Event, Vaccination

logger = logging.getLogger(__name__)


class ReminderNotificationService:
    """Formats reminder messages and hands them to the log"""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        # most recent messages, newest last
        self.sent: Deque[Tuple[str, str]] = deque(maxlen=100)

    # ==================== MESSAGES ====================

    @staticmethod
    def vaccination_message(vaccination: Vaccination) -> str:
        dog_name = vaccination.dog.name if vaccination.dog else 'Your dog'
        return (f"REMINDER: {dog_name}'s {vaccination.vaccine_name} vaccination is due on "
                f"{vaccination.next_due_date.isoformat()}")

    @staticmethod
    def event_message(event: Event) -> str:
        dog_info = f" for {event.dog.name}" if event.dog else ''
        return f'REMINDER: "{event.title}"{dog_info} is coming up on {event.event_date.isoformat()}'

    # ==================== DELIVERY ====================

    def _emit(self, kind: str, message: str) -> None:
        self.log.info(message)
        self.sent.append((kind, message))

    def send_vaccination_reminder(self, vaccination: Vaccination) -> None:
        self._emit('vaccination', self.vaccination_message(vaccination))

    def send_event_reminder(self, event: Event) -> None:
        self._emit('event', self.event_message(event))


_notification_instance = None


def get_notification_service() -> ReminderNotificationService:
    """Get notification service instance (singleton)"""
    global _notification_instance
    if _notification_instance is None:
        _notification_instance = ReminderNotificationService()
    return _notification_instance
