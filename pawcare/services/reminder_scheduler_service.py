"""
Reminder Scheduler Service
Runs the reminder scan once a day on an APScheduler cron trigger and lets
the CLI trigger it by hand. Two runs never overlap: a trigger that finds a
scan in progress is skipped, not queued.
"""

import atexit
import logging
import sys
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import pytz
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from pawcare import db
from pawcare.services.reminder_notification_service import get_notification_service
from pawcare.services.reminder_scan_service import ReminderScanService, ScanResult

logger = logging.getLogger(__name__)

JOB_ID = 'daily_reminder_scan'


class ReminderSchedulerService:
    def __init__(self, app=None):
        self.app = app
        self.scheduler = None
        self.is_running = False
        self.last_run: Optional[datetime] = None
        self.last_result: Optional[ScanResult] = None
        self.last_error: Optional[str] = None
        self._run_lock = threading.Lock()

    def set_app(self, app):
        """Set the Flask app instance"""
        self.app = app

    @property
    def timezone(self):
        return pytz.timezone(self.app.config.get('SCHEDULER_TIMEZONE', 'UTC'))

    # ==================== MAIN SCHEDULER FUNCTIONS ====================

    def start_scheduler(self):
        if self.is_running:
            logger.warning("Reminder scheduler is already running")
            return

        config = self.app.config
        self.scheduler = BackgroundScheduler(
            jobstores={'default': MemoryJobStore()},
            executors={'default': ThreadPoolExecutor(1)},
            job_defaults={
                'coalesce': True,
                'max_instances': 1,
                'misfire_grace_time': 300
            },
            timezone=self.timezone
        )
        self.scheduler.add_listener(self._job_executed, EVENT_JOB_EXECUTED)
        self.scheduler.add_listener(self._job_error, EVENT_JOB_ERROR)
        self.scheduler.add_job(
            func=self.run_scan,
            trigger='cron',
            hour=config.get('REMINDER_SCAN_HOUR', 9),
            minute=config.get('REMINDER_SCAN_MINUTE', 0),
            id=JOB_ID,
            replace_existing=True
        )
        self.scheduler.start()
        self.is_running = True
        atexit.register(self.stop_scheduler)

        logger.info(f"Reminder scheduler started, scanning daily at "
                    f"{config.get('REMINDER_SCAN_HOUR', 9):02d}:{config.get('REMINDER_SCAN_MINUTE', 0):02d} "
                    f"{config.get('SCHEDULER_TIMEZONE', 'UTC')}")

    def stop_scheduler(self):
        if not self.is_running:
            return
        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Reminder scheduler stopped")

    def _job_executed(self, event):
        logger.info(f"✅ Job executed: {event.job_id}")

    def _job_error(self, event):
        logger.error(f"❌ Job error: {event.job_id} - {event.exception}")

    # ==================== SCAN ====================

    def run_scan(self, today=None) -> Optional[ScanResult]:
        """
        Run one scan under the app context. Returns None when another scan
        holds the lock. Scan errors are recorded and re-raised.
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Reminder scan already in progress, skipping this trigger")
            return None

        try:
            today = today or datetime.now(self.timezone).date()
            with self.app.app_context():
                scanner = ReminderScanService(db.session, get_notification_service(),
                                              self.app.config['REMINDER_WINDOWS'])
                result = scanner.run(today)
            self.last_result = result
            self.last_error = None
            return result
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Reminder scan failed: {str(e)}")
            raise
        finally:
            self.last_run = datetime.now(timezone.utc)
            self._run_lock.release()

    # ==================== MANUAL TRIGGER FUNCTIONS ====================

    def trigger_immediate_check(self, today=None) -> Dict[str, Any]:
        logger.info("🚀 Manual trigger: immediate reminder scan")
        try:
            result = self.run_scan(today)
        except Exception as e:
            return {
                'success': False,
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        if result is None:
            return {
                'success': False,
                'skipped': True,
                'message': 'A reminder scan is already in progress',
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        return {
            'success': True,
            'message': 'Immediate reminder scan completed',
            'result': result.to_dict(),
            'timestamp': datetime.now(timezone.utc).isoformat()
        }

    def get_scheduler_status(self) -> Dict[str, Any]:
        next_run = None
        if self.is_running:
            job = self.scheduler.get_job(JOB_ID)
            if job and job.next_run_time:
                next_run = job.next_run_time.isoformat()
        return {
            'scheduler_running': self.is_running,
            'scan_in_progress': self._run_lock.locked(),
            'next_run': next_run,
            'last_run': self.last_run.isoformat() if self.last_run else None,
            'last_result': self.last_result.to_dict() if self.last_result else None,
            'last_error': self.last_error,
            'timestamp': datetime.now(timezone.utc).isoformat()
        }


# ==================== SERVICE INSTANCE ====================

_scheduler_instance = None


def get_scheduler_service(app=None) -> ReminderSchedulerService:
    """Get scheduler service instance (singleton)"""
    global _scheduler_instance
    if _scheduler_instance is None:
        _scheduler_instance = ReminderSchedulerService(app)
    elif app is not None and _scheduler_instance.app is None:
        _scheduler_instance.set_app(app)
    return _scheduler_instance


def start_reminder_scheduler(app=None):
    scheduler = get_scheduler_service(app)
    scheduler.start_scheduler()
    return scheduler


def stop_reminder_scheduler():
    scheduler = get_scheduler_service()
    scheduler.stop_scheduler()


def main(argv=None, app=None) -> int:
    """
    Command line entry point: start, check or status.

    The app is built with its own scheduler start disabled so that every
    command works on this module's single scheduler instance. A `check` run
    here only excludes scans in this process; while a web process runs the
    scheduler, trigger checks through that process instead.
    """
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python -m pawcare.services.reminder_scheduler_service [start|check|status]")
        return 2

    if app is None:
        from pawcare import create_app
        app = create_app(start_scheduler=False)

    command = argv[0].lower()

    if command == "start":
        print("Starting reminder scheduler...")
        start_reminder_scheduler(app)

        # Keep running
        try:
            while True:
                time.sleep(60)
        except KeyboardInterrupt:
            print("\nStopping scheduler...")
            stop_reminder_scheduler()

    elif command == "check":
        print("Running immediate reminder check...")
        result = get_scheduler_service(app).trigger_immediate_check()
        print(f"Result: {result}")

    elif command == "status":
        print("Getting scheduler status...")
        status = get_scheduler_service(app).get_scheduler_status()
        print(f"Status: {status}")

    else:
        print("Unknown command. Use: start, check, or status")
        return 2

    return 0


if __name__ == "__main__":
    # Run against the importable module so the CLI shares its singleton
    from pawcare.services import reminder_scheduler_service

    sys.exit(reminder_scheduler_service.main())
