"""Periodic catalog refresh."""

import threading
import time
from typing import Optional

import schedule

from i18n_hub.core.config import settings
from i18n_hub.core.logging import get_module_logger
from i18n_hub.i18n.cloud import CloudClient

logger = get_module_logger()


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            job(*args, **kwargs)
        except Exception as e:
            logger.error(
                "safe_run_error",
                function=job.__name__,
                module=job.__module__,
                error=str(e),
            )

    wrapper.__name__ = job.__name__
    return wrapper


def init(cloud: CloudClient, refresh_minutes: Optional[int] = None):
    """Register the catalog refresh job.

    Args:
        cloud: Client whose manifest is refreshed.
        refresh_minutes: Interval, default CLOUD_REFRESH_MINUTES.
    """
    minutes = refresh_minutes or settings.cloud.refresh_minutes
    logger.info("scheduled_tasks_initialized", refresh_minutes=minutes)
    schedule.every(minutes).minutes.do(safe_run(refresh_catalog), cloud=cloud)


def refresh_catalog(cloud: CloudClient):
    entries = cloud.fetch_manifest(force=True)
    logger.info("catalog_refreshed", entry_count=len(entries), loaded=cloud.has_loaded)


def run_continuously(interval=1):
    """Continuously run, while executing pending jobs at each
    elapsed time interval.
    @return cease_continuous_run: threading. Event which can
    be set to cease continuous run. Missed jobs are not replayed: a
    job due several times during one interval runs only once.
    """
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        @classmethod
        def run(cls):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                time.sleep(interval)

    continuous_thread = ScheduleThread(daemon=True)
    continuous_thread.start()
    return cease_continuous_run
