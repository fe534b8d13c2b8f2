"""
Record lifecycle: creation, edits, soft delete and restore.

A record is Active when created and moves between Active and
SoftDeleted only through soft_delete() and restore(). Audit timestamps
come from the injected clock, never from the caller. Every write
invalidates the cached copy of the record and of its kind's list
before returning.

Usage:
    customers = lifecycle_for(Customer)
    customer = customers.create({'name': 'Acme Corporation', 'email': 'contact@acme.com'})
    customers.soft_delete(customer.pk)
    customers.get(customer.pk)                         # None
    customers.get(customer.pk, include_deleted=True)   # the deleted record
    customers.restore(customer.pk)
"""

import logging

from .cache import RecordCache
from .clock import SystemClock
from .exceptions import ConflictError, NotFoundError, ValidationError
from .models import ACTIVE, FieldError, SoftDeleted
from .stores import ModelStore, Visibility

logger = logging.getLogger(__name__)

# Fields only the lifecycle may write. Audit timestamps may be supplied on
# create so they can be checked, but are always replaced by the clock.
CREATE_MANAGED_FIELDS = frozenset({'pk', 'id', 'is_deleted', 'deleted_at'})
UPDATE_MANAGED_FIELDS = CREATE_MANAGED_FIELDS | {'created_at', 'modified_at'}

MANAGED_FIELD_MESSAGE = 'This field is managed by the record lifecycle and cannot be set directly'


class RecordLifecycleManager:
    """
    Enforces the lifecycle of one record kind.

    Collaborators:
    - store: insert / find_by_id / find_all / update (ModelStore by default)
    - clock: now() (SystemClock by default)
    - cache: optional RecordCache; reads are served from it when present
    """

    def __init__(self, model, store=None, clock=None, cache=None):
        self.model = model
        self.store = store if store is not None else ModelStore(model)
        self.clock = clock if clock is not None else SystemClock()
        self.cache = cache

        opts = model._meta
        self.label = opts.verbose_name.capitalize()
        self._field_names = {}
        for field in opts.concrete_fields:
            self._field_names[field.name] = field.name
            self._field_names[field.attname] = field.name
        self._field_names['pk'] = opts.pk.name

    # Writes

    def create(self, fields):
        """Validate and insert a new Active record; return it with its id."""
        fields = dict(fields)
        now = self.clock.now()
        errors = self._input_errors(fields, CREATE_MANAGED_FIELDS | {self.model._meta.pk.name})

        record = self.model(**{
            name: value for name, value in fields.items()
            if self._is_writable(name, CREATE_MANAGED_FIELDS)
        })
        record.deletion_state = ACTIVE
        record.created_at = fields.get('created_at') or now
        record.modified_at = fields.get('modified_at') or now

        errors.extend(record.rule_violations(now))
        if errors:
            logger.warning(f"Rejected new {self.label}: {len(errors)} validation error(s)")
            raise ValidationError(errors)

        record.created_at = now
        record.modified_at = now
        record.pk = self.store.insert(record)
        self._invalidate()

        logger.info(f"{self.label} {record.pk} created at {now.isoformat()}")
        return record

    def update(self, pk, changes):
        """Apply field changes to a visible record and bump modified_at."""
        record = self.store.find_by_id(pk)
        if record is None:
            logger.warning(f"{self.label} {pk} not found for update")
            raise NotFoundError(f"{self.label} {pk} not found")

        changes = dict(changes)
        now = self.clock.now()
        errors = self._input_errors(changes, UPDATE_MANAGED_FIELDS | {self.model._meta.pk.name})

        changed = []
        for name, value in changes.items():
            if self._is_writable(name, UPDATE_MANAGED_FIELDS):
                setattr(record, name, value)
                changed.append(self._field_names[name])
        record.modified_at = now

        errors.extend(record.rule_violations(now))
        if errors:
            logger.warning(f"Rejected update of {self.label} {pk}: {len(errors)} validation error(s)")
            raise ValidationError(errors)

        self.store.update(record, sorted(set(changed)) + ['modified_at'])
        self._invalidate(record.pk)

        logger.info(f"{self.label} {record.pk} updated: {', '.join(sorted(set(changed))) or 'no fields'}")
        return record

    def soft_delete(self, pk):
        """Move a record from Active to SoftDeleted."""
        record = self._find_for_transition(pk)
        if isinstance(record.deletion_state, SoftDeleted):
            logger.warning(f"{self.label} {pk} is already soft deleted")
            raise ConflictError(f"{self.label} {pk} is already deleted")

        now = self.clock.now()
        record.deletion_state = SoftDeleted(now)
        record.modified_at = now
        self.store.update(record, ['is_deleted', 'deleted_at', 'modified_at'])
        self._invalidate(record.pk)

        logger.info(f"{self.label} {record.pk} soft deleted at {now.isoformat()}")
        return record

    def restore(self, pk):
        """Move a record from SoftDeleted back to Active."""
        record = self._find_for_transition(pk)
        if not isinstance(record.deletion_state, SoftDeleted):
            logger.warning(f"{self.label} {pk} is not deleted, cannot restore")
            raise ConflictError(f"{self.label} {pk} is not deleted")

        now = self.clock.now()
        record.deletion_state = ACTIVE
        record.modified_at = now
        self.store.update(record, ['is_deleted', 'deleted_at', 'modified_at'])
        self._invalidate(record.pk)

        logger.info(f"{self.label} {record.pk} restored at {now.isoformat()}")
        return record

    # Reads

    def get(self, pk, include_deleted=False):
        """
        Return the record or None.

        Default reads hide soft-deleted records and go through the cache.
        include_deleted=True always reads the store.
        """
        if include_deleted:
            return self.store.find_by_id(pk, Visibility.INCLUDE_DELETED)

        if self.cache is not None:
            record = self.cache.get(pk)
            if record is not None:
                logger.debug(f"{self.label} {pk} retrieved from cache")
                return record
            logger.debug(f"{self.label} {pk} not in cache, reading store")

        record = self.store.find_by_id(pk)
        if record is not None and self.cache is not None:
            self.cache.set(record.pk, record)
        return record

    def list_all(self, include_deleted=False):
        """Return every record of this kind under the same visibility rule as get()."""
        if include_deleted:
            return self.store.find_all(Visibility.INCLUDE_DELETED)

        if self.cache is not None:
            records = self.cache.get_list()
            if records is not None:
                logger.debug(f"{self.label} list retrieved from cache")
                return records

        records = self.store.find_all()
        if self.cache is not None:
            self.cache.set_list(records)
        return records

    # Helpers

    def _find_for_transition(self, pk):
        record = self.store.find_by_id(pk, Visibility.INCLUDE_DELETED)
        if record is None:
            logger.warning(f"{self.label} {pk} not found")
            raise NotFoundError(f"{self.label} {pk} not found")
        return record

    def _is_writable(self, name, managed):
        return name in self._field_names and self._field_names[name] not in managed and name not in managed

    def _input_errors(self, fields, managed):
        errors = []
        for name in fields:
            if name in managed or self._field_names.get(name) in managed:
                errors.append(FieldError(name, MANAGED_FIELD_MESSAGE))
            elif name not in self._field_names:
                errors.append(FieldError(name, 'Unknown field'))
        return errors

    def _invalidate(self, pk=None):
        if self.cache is not None:
            self.cache.invalidate(pk)


def lifecycle_for(model, clock=None):
    """Build the standard cached lifecycle manager for a record model."""
    return RecordLifecycleManager(
        model,
        clock=clock,
        cache=RecordCache(model._meta.model_name),
    )
