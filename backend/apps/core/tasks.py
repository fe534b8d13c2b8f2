"""
Core Celery tasks for record maintenance.

Best practices demonstrated:
- Scheduled periodic tasks
- Proper logging
- Error handling per record, so one protected row doesn't stop the run
"""

from datetime import timedelta
import logging

from celery import shared_task
from django.apps import apps
from django.conf import settings
from django.db.models import ProtectedError
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(name='apps.core.tasks.purge_deleted_records')
def purge_deleted_records(retention_days=None):
    """
    Permanently remove records soft-deleted more than `retention_days` ago.

    This is the only hard-delete path and sits outside the record
    lifecycle. Models are processed in RECORDS['PURGE_MODELS'] order
    (children before parents). A record still referenced through a
    protected foreign key is kept and logged.

    Returns:
        dict: model label -> number of records removed
    """
    if retention_days is None:
        retention_days = settings.RECORDS['PURGE_RETENTION_DAYS']
    cutoff = timezone.now() - timedelta(days=retention_days)

    purged = {}
    for label in settings.RECORDS['PURGE_MODELS']:
        model = apps.get_model(label)
        expired = model.all_objects.filter(is_deleted=True, deleted_at__lt=cutoff)

        count = 0
        for record in list(expired):
            try:
                record.hard_delete()
                count += 1
            except ProtectedError:
                logger.warning(
                    f"Kept {label} {record.pk}: still referenced by other records"
                )

        purged[label] = count
        logger.info(f"Purged {count} {label} records deleted before {cutoff.isoformat()}")

    return purged
