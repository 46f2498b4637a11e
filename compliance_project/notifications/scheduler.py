from apscheduler.schedulers.background import BackgroundScheduler
from django.conf import settings
from django.core.management import call_command
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

# ============================================================
# GLOBAL SAFETY LOCK
# Prevents scheduler from starting more than once per process
# ============================================================
_scheduler = None


def start_scheduler():
    """
    Start APScheduler safely.

    - Respects ENABLE_SCHEDULER setting
    - Prevents double start (Django autoreload, imports)
    - Overlap across processes is safe: drains claim rows atomically
    """
    global _scheduler

    # --------------------------------------------
    # DEV / PROD TOGGLE
    # --------------------------------------------
    if not getattr(settings, "ENABLE_SCHEDULER", False):
        logger.info("APScheduler disabled via settings (ENABLE_SCHEDULER=False)")
        return

    # --------------------------------------------
    # SAFETY LOCK (NO DOUBLE START)
    # --------------------------------------------
    if _scheduler is not None:
        logger.info("APScheduler already running, skipping initialization")
        return

    logger.info("Starting APScheduler...")

    _scheduler = BackgroundScheduler(
        timezone=settings.TIME_ZONE
    )

    interval = settings.SCHEDULER_INTERVAL_MINUTES

    # --------------------------------------------
    # DRAIN: REMINDERS + OUTBOX
    # --------------------------------------------
    _scheduler.add_job(
        run_reminder_drain,
        trigger="interval",
        minutes=interval,
        id="send_deadline_reminders",
        replace_existing=True,
        max_instances=1,      # Prevent overlapping runs in this process
        coalesce=True,        # Merge missed runs if server was down
    )

    _scheduler.add_job(
        run_outbox_dispatch,
        trigger="interval",
        minutes=interval,
        id="dispatch_outbox",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    # --------------------------------------------
    # MAINTENANCE
    # --------------------------------------------
    _scheduler.add_job(
        run_stale_claim_sweep,
        trigger="interval",
        hours=1,
        id="release_stale_claims",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    _scheduler.add_job(
        run_scheduling_pass,
        trigger="cron",
        hour=6,
        minute=0,
        id="schedule_reminders",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    _scheduler.start()

    logger.info(
        "APScheduler started: reminder drain and outbox dispatch every %s minutes, "
        "stale-claim sweep hourly, scheduling pass daily at 06:00",
        interval,
    )


# ============================================================
# JOB WRAPPERS
# Keep all business logic in the management commands
# ============================================================

def run_reminder_drain():
    logger.info(f"Running scheduled reminder drain at {timezone.now():%Y-%m-%d %H:%M:%S}")
    call_command("send_deadline_reminders")


def run_outbox_dispatch():
    call_command("dispatch_outbox")


def run_stale_claim_sweep():
    call_command("release_stale_claims")


def run_scheduling_pass():
    call_command("schedule_reminders")
