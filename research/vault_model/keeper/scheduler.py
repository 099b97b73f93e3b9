"""APScheduler integration for the liquidation monitor"""
import logging
import re
from typing import Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .monitor import LiquidationMonitor

logger = logging.getLogger(__name__)

JOB_ID = "liquidation-monitor"
CRONTAB_FIELDS = ("minute", "hour", "day", "month", "day_of_week")
# Crontab weekday numbers, 0 and 7 are both Sunday
CRONTAB_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")
NUMERIC_WEEKDAYS = re.compile(r"(\*|\d+(?:-\d+)?)(?:/(\d+))?")

def crontab_day_of_week(expression: str) -> str:
    """Rewrite numeric crontab weekdays as names

    APScheduler counts numeric weekdays from Monday, crontab from Sunday. Names
    mean the same to both and pass through unchanged.
    """
    if expression == "*":
        return expression
    days = []
    for part in expression.split(","):
        match = NUMERIC_WEEKDAYS.fullmatch(part)
        if match is None:
            days.append(part)
            continue
        span, step = match.groups()
        if span == "*":
            first, last = 0, 6
        else:
            first, _, last = span.partition("-")
            first = int(first)
            last = int(last) if last else (6 if step else first)
        if not 0 <= first <= last <= 7:
            raise ValueError(f"Invalid day of week: {part!r}")
        days.extend(CRONTAB_WEEKDAYS[d] for d in range(first, last + 1, int(step or 1)))
    return ",".join(dict.fromkeys(days))

def build_trigger(schedule: str, timezone: str = "UTC") -> CronTrigger:
    """Cron trigger from a 5 field crontab or a 6 field expression led by seconds"""
    fields = schedule.split()
    if len(fields) not in (5, 6):
        raise ValueError(f"Unsupported schedule: {schedule!r}")
    values = dict(zip(CRONTAB_FIELDS, fields[-5:]))
    values["day_of_week"] = crontab_day_of_week(values["day_of_week"])
    if len(fields) == 6:
        values["second"] = fields[0]
    return CronTrigger(timezone=timezone, **values)

def run_tick(monitor: LiquidationMonitor) -> bool:
    """Job body, a failing tick never reaches the scheduler"""
    try:
        return monitor.on_tick()
    except Exception:
        logger.exception("Unhandled error in liquidation monitor tick")
        return False

def create_scheduler(
    monitor: LiquidationMonitor,
    schedule: str,
    scheduler: Optional[BaseScheduler] = None,
) -> BaseScheduler:
    """Register the monitor as a single-instance job, ticks never overlap"""
    scheduler = scheduler or BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        run_tick,
        build_trigger(schedule),
        args=[monitor],
        id=JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info(f"Scheduled liquidation monitor on {schedule!r}")
    return scheduler
