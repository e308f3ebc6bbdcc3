"""
Celery configuration for async grouping generation.
"""

from celery import Celery

from app.core.config import REDIS_URL

# Create Celery app
celery_app = Celery(
    "club_groupings",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["app.tasks.grouping_tasks"]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="America/Los_Angeles",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=120,  # Rosters are small; anything longer is a bug
    task_soft_time_limit=90,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
)
