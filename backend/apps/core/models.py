"""
Core models providing base classes for all record apps.

Best practices demonstrated:
- Abstract base models for common fields
- Soft delete with a default manager that hides deleted rows
- Timestamp tracking owned by the record lifecycle
- Model-level validation rules reported per field
"""

from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime

from django.db import models
from django.utils import timezone


FieldError = namedtuple('FieldError', ['field', 'message'])


@dataclass(frozen=True)
class Active:
    """Deletion state of a visible record."""


@dataclass(frozen=True)
class SoftDeleted:
    """Deletion state of a record hidden from default reads."""
    deleted_at: datetime


ACTIVE = Active()


class TimeStampedModel(models.Model):
    """
    Abstract base class that provides 'created_at' and 'modified_at' fields.

    The record lifecycle stamps both from its clock; the defaults only
    cover rows written outside of it (fixtures, shell sessions).
    """
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    modified_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True
        ordering = ['-created_at']


class ActiveManager(models.Manager):
    """Default manager: every query excludes soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class SoftDeleteModel(models.Model):
    """
    Abstract base class that provides soft delete functionality.

    Instead of actually deleting records, we mark them as deleted.
    `objects` hides them everywhere; `all_objects` is the explicit
    opt-in for admin views and restore.
    """
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = ActiveManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    @property
    def deletion_state(self):
        if self.is_deleted:
            return SoftDeleted(self.deleted_at)
        return ACTIVE

    @deletion_state.setter
    def deletion_state(self, state):
        # Both columns are written together
        if isinstance(state, SoftDeleted):
            self.is_deleted = True
            self.deleted_at = state.deleted_at
        else:
            self.is_deleted = False
            self.deleted_at = None

    def hard_delete(self):
        """Actually delete the record from database."""
        return super().delete()


class BaseModel(TimeStampedModel, SoftDeleteModel):
    """
    Combination of TimeStamped and SoftDelete models.
    Use this as the base for every record kind.
    """
    class Meta:
        abstract = True

    def rule_violations(self, now):
        """
        Yield a FieldError for every rule the record breaks at `now`.

        Subclasses extend this with their own rules and
        `yield from super().rule_violations(now)`.
        """
        if self.is_deleted and self.deleted_at is None:
            yield FieldError('deleted_at', 'deleted_at must be set when is_deleted is true')
        if not self.is_deleted and self.deleted_at is not None:
            yield FieldError('deleted_at', 'deleted_at should be null when is_deleted is false')

        if self.created_at is not None and self.created_at > now:
            yield FieldError('created_at', 'created_at cannot be in the future')
        if (self.created_at is not None and self.modified_at is not None
                and self.modified_at < self.created_at):
            yield FieldError('modified_at', 'modified_at cannot be before created_at')
