"""
Celery configuration for background and scheduled tasks.

Beat opens the register every morning and closes it every evening; both
jobs call RegisterSessionService directly (see app.modules.registers.tasks).
"""
from celery import Celery
from celery.schedules import crontab
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

# Create Celery instance
celery_app = Celery(
    "caisse",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.modules.registers.tasks",
    ]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.SCHEDULER_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,  # 5 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    # Result backend settings
    result_expires=3600,  # 1 hour

    task_routes={
        "app.modules.registers.tasks.*": {"queue": "registers"},
    },

    # Beat schedule: daily register open/close
    beat_schedule={
        "open-register-daily": {
            "task": "app.modules.registers.tasks.open_register",
            "schedule": crontab(
                hour=settings.REGISTER_OPEN_HOUR,
                minute=settings.REGISTER_OPEN_MINUTE
            ),
        },
        "close-register-daily": {
            "task": "app.modules.registers.tasks.close_register",
            "schedule": crontab(
                hour=settings.REGISTER_CLOSE_HOUR,
                minute=settings.REGISTER_CLOSE_MINUTE
            ),
        },
    }
)

if __name__ == "__main__":
    celery_app.start()
