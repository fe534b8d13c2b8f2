"""
Persistence for lifecycle-managed records.

The visibility predicate is a single parameter threaded through every
read, defaulting to excluding soft-deleted rows. Reading deleted rows
always takes an explicit Visibility.INCLUDE_DELETED.
"""

import enum
import logging

logger = logging.getLogger(__name__)


class Visibility(enum.Enum):
    EXCLUDE_DELETED = 'exclude_deleted'
    INCLUDE_DELETED = 'include_deleted'

    @classmethod
    def for_flag(cls, include_deleted):
        return cls.INCLUDE_DELETED if include_deleted else cls.EXCLUDE_DELETED


class ModelStore:
    """ORM-backed store for one SoftDeleteModel subclass."""

    def __init__(self, model):
        self.model = model

    def queryset(self, visibility=Visibility.EXCLUDE_DELETED):
        if visibility is Visibility.INCLUDE_DELETED:
            logger.info(f"Reading {self.model._meta.label} including soft-deleted records")
            return self.model.all_objects.all()
        return self.model.objects.all()

    def insert(self, record):
        """Insert a new row and return its database-assigned id."""
        record.save(force_insert=True)
        return record.pk

    def find_by_id(self, pk, visibility=Visibility.EXCLUDE_DELETED):
        return self.queryset(visibility).filter(pk=pk).first()

    def find_all(self, visibility=Visibility.EXCLUDE_DELETED):
        return list(self.queryset(visibility))

    def update(self, record, fields=None):
        """Write the given columns (all of them when omitted) back to the row."""
        record.save(update_fields=fields)
        return record
