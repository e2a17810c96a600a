"""
Celery configuration for the Crop Library.

This module configures Celery for asynchronous task processing.
Search index updates run on their own queue so a slow search
cluster never delays other work.
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("crops")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Configure task queues for different operations
app.conf.task_queues = {
    "search": {
        "exchange": "search",
        "routing_key": "search",
    },
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
}

# Default task routing
app.conf.task_default_queue = "default"
app.conf.task_default_exchange = "default"
app.conf.task_default_routing_key = "default"

# Route specific tasks to their queues
app.conf.task_routes = {
    "crops.tasks.index_crop": {"queue": "search"},
    "crops.tasks.deindex_crop": {"queue": "search"},
    "crops.tasks.reindex_approved_crops": {"queue": "search"},
}

# Configure Celery Beat schedule for periodic tasks
app.conf.beat_schedule = {
    # Nightly full rebuild catches any index update that was dropped
    "reindex-approved-crops-nightly": {
        "task": "crops.tasks.reindex_approved_crops",
        "schedule": crontab(minute=0, hour=3),
    },
}
