"""
Celery configuration for background record maintenance.

This module demonstrates best practices for Celery setup:
- Auto-discovery of tasks
- Task routing to a dedicated maintenance queue
- Periodic tasks with Celery beat
- Error handling and monitoring through signals
"""

import os
from celery import Celery
from celery.signals import task_prerun, task_postrun, task_failure
import logging

logger = logging.getLogger(__name__)

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

# Create Celery app
app = Celery('records')

# Load configuration from Django settings with CELERY namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()


app.conf.task_routes = {
    # Irreversible maintenance work stays off the default queue
    'apps.core.tasks.purge_deleted_records': {
        'queue': 'maintenance',
        'routing_key': 'maintenance.purge',
    },
}


# Task execution monitoring
@task_prerun.connect
def task_prerun_handler(task_id, task, *args, **kwargs):
    """Log when a task starts."""
    logger.info(f'Task {task.name}[{task_id}] starting')


@task_postrun.connect
def task_postrun_handler(task_id, task, retval, *args, **kwargs):
    """Log when a task completes."""
    logger.info(f'Task {task.name}[{task_id}] completed')


@task_failure.connect
def task_failure_handler(task_id, exception, *args, **kwargs):
    """Log when a task fails."""
    logger.error(f'Task {task_id} failed: {exception}', exc_info=True)


# Beat schedule for periodic tasks
app.conf.beat_schedule = {
    'purge-deleted-records': {
        'task': 'apps.core.tasks.purge_deleted_records',
        'schedule': 86400.0,  # Every day
        'options': {
            'queue': 'maintenance',
        },
    },
}

app.conf.timezone = 'UTC'
