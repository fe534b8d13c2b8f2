"""
Tests for the record lifecycle.

Best practices for testing:
- Pin time with an injected clock
- Test every state transition and its rejection
- Count store calls to prove cache hits
- Test invariants after every operation
"""

from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.core.cache import cache

from apps.customers.models import Customer
from apps.invoices.models import Invoice
from apps.telephone_numbers.models import TelephoneNumber
from .cache import RecordCache
from .exceptions import ConflictError, NotFoundError, ValidationError
from .lifecycle import RecordLifecycleManager, lifecycle_for
from .models import ACTIVE, SoftDeleted
from .stores import ModelStore, Visibility
from .tasks import purge_deleted_records


def assert_invariants(record):
    assert record.is_deleted == (record.deleted_at is not None)
    assert record.modified_at >= record.created_at


def snapshot(record):
    return {
        field.attname: getattr(record, field.attname)
        for field in record._meta.concrete_fields
    }


@pytest.fixture
def customers(clock):
    return RecordLifecycleManager(Customer, clock=clock, cache=RecordCache('customer'))


@pytest.fixture
def invoices(clock):
    return RecordLifecycleManager(Invoice, clock=clock, cache=RecordCache('invoice'))


@pytest.fixture
def customer(customers):
    return customers.create({'name': 'Acme Corporation', 'email': 'contact@acmecorporation.com'})


@pytest.mark.django_db
class TestCreate:
    """Creating records."""

    def test_create_sets_active_state_and_audit_fields(self, customers, clock):
        customer = customers.create({'name': 'Acme Corporation', 'email': 'contact@acme.com'})

        assert customer.pk is not None
        assert customer.is_deleted is False
        assert customer.deleted_at is None
        assert customer.created_at == clock.now()
        assert customer.modified_at == clock.now()
        assert_invariants(customer)

    def test_create_persists_record(self, customer):
        stored = Customer.objects.get(pk=customer.pk)
        assert stored.name == 'Acme Corporation'
        assert stored.created_at == customer.created_at

    def test_future_created_at_reports_both_violations(self, customers, clock):
        """A future created_at also puts modified_at before it: two errors, not one."""
        with pytest.raises(ValidationError) as excinfo:
            customers.create({
                'name': 'Acme Corporation',
                'email': 'contact@acme.com',
                'created_at': clock.now() + timedelta(days=1),
                'modified_at': clock.now(),
            })

        assert sorted(excinfo.value.fields) == ['created_at', 'modified_at']
        messages = [e.message for e in excinfo.value.errors]
        assert 'created_at cannot be in the future' in messages
        assert 'modified_at cannot be before created_at' in messages
        assert Customer.all_objects.count() == 0

    def test_supplied_past_timestamps_are_replaced_by_clock(self, customers, clock):
        customer = customers.create({
            'name': 'Acme Corporation',
            'email': 'contact@acme.com',
            'created_at': clock.now() - timedelta(days=3),
            'modified_at': clock.now() - timedelta(days=1),
        })

        assert customer.created_at == clock.now()
        assert customer.modified_at == clock.now()

    def test_lifecycle_fields_cannot_be_set_on_create(self, customers, clock):
        with pytest.raises(ValidationError) as excinfo:
            customers.create({
                'name': 'Acme Corporation',
                'email': 'contact@acme.com',
                'is_deleted': True,
                'deleted_at': clock.now(),
            })

        assert sorted(excinfo.value.fields) == ['deleted_at', 'is_deleted']

    def test_unknown_field_is_rejected(self, customers):
        with pytest.raises(ValidationError) as excinfo:
            customers.create({'name': 'Acme Corporation', 'email': 'contact@acme.com', 'nickname': 'A'})

        assert excinfo.value.errors[0].field == 'nickname'
        assert excinfo.value.errors[0].message == 'Unknown field'

    def test_validation_errors_are_collected_together(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create({
                'customer': customer,
                'invoice_number': 'INV-001',
                'amount': Decimal('-5'),
                'invoice_date': clock.now() + timedelta(days=2),
            })

        assert sorted(excinfo.value.fields) == ['amount', 'invoice_date']


@pytest.mark.django_db
class TestUpdate:
    """In-place edits."""

    def test_update_bumps_modified_at_only(self, customers, customer, clock):
        clock.advance(minutes=5)

        updated = customers.update(customer.pk, {'name': 'Acme Industries'})

        assert updated.name == 'Acme Industries'
        assert updated.created_at == customer.created_at
        assert updated.modified_at == clock.now()
        assert updated.is_deleted is False
        assert updated.deleted_at is None
        assert Customer.objects.get(pk=customer.pk).name == 'Acme Industries'

    @pytest.mark.parametrize('field', ['id', 'pk', 'is_deleted', 'deleted_at', 'created_at', 'modified_at'])
    def test_managed_fields_cannot_be_changed(self, customers, customer, clock, field):
        with pytest.raises(ValidationError) as excinfo:
            customers.update(customer.pk, {field: clock.now()})

        assert excinfo.value.fields == [field]
        assert snapshot(Customer.all_objects.get(pk=customer.pk)) == snapshot(customer)

    def test_update_missing_record(self, customers):
        with pytest.raises(NotFoundError):
            customers.update(999999, {'name': 'Nobody'})

    def test_update_soft_deleted_record_is_not_found(self, customers, customer):
        customers.soft_delete(customer.pk)

        with pytest.raises(NotFoundError):
            customers.update(customer.pk, {'name': 'Acme Industries'})

    def test_update_applies_entity_rules(self, customers, customer):
        with pytest.raises(ValidationError) as excinfo:
            customers.update(customer.pk, {'email': 'contact@wrongdomain.com'})

        assert excinfo.value.fields == ['email']
        assert Customer.objects.get(pk=customer.pk).email == 'contact@acmecorporation.com'


@pytest.mark.django_db
class TestSoftDeleteAndRestore:
    """Deletion state transitions."""

    def test_soft_delete(self, customers, customer, clock):
        clock.advance(minutes=1)

        deleted = customers.soft_delete(customer.pk)

        assert deleted.is_deleted is True
        assert deleted.deleted_at == clock.now()
        assert deleted.modified_at == clock.now()
        assert deleted.deletion_state == SoftDeleted(clock.now())
        assert_invariants(deleted)

    def test_soft_delete_twice_conflicts_and_changes_nothing(self, customers, customer, clock):
        customers.soft_delete(customer.pk)
        before = snapshot(Customer.all_objects.get(pk=customer.pk))
        clock.advance(minutes=1)

        with pytest.raises(ConflictError, match='already deleted'):
            customers.soft_delete(customer.pk)

        assert snapshot(Customer.all_objects.get(pk=customer.pk)) == before

    def test_restore_active_record_conflicts_and_changes_nothing(self, customers, customer, clock):
        before = snapshot(Customer.all_objects.get(pk=customer.pk))
        clock.advance(minutes=1)

        with pytest.raises(ConflictError, match='not deleted'):
            customers.restore(customer.pk)

        assert snapshot(Customer.all_objects.get(pk=customer.pk)) == before

    def test_missing_records_are_not_found(self, customers):
        with pytest.raises(NotFoundError):
            customers.soft_delete(424242)
        with pytest.raises(NotFoundError):
            customers.restore(424242)

    def test_delete_then_restore_only_moves_modified_at(self, customers, customer, clock):
        before = snapshot(Customer.objects.get(pk=customer.pk))

        clock.advance(minutes=1)
        customers.soft_delete(customer.pk)
        clock.advance(minutes=1)
        restored = customers.restore(customer.pk)

        after = snapshot(Customer.objects.get(pk=customer.pk))
        assert after['modified_at'] > before['modified_at']
        after.pop('modified_at')
        before.pop('modified_at')
        assert after == before
        assert restored.deletion_state == ACTIVE
        assert_invariants(restored)

    def test_invariants_hold_after_every_operation(self, customers, clock):
        record = customers.create({'name': 'Globex Corporation', 'email': 'info@globex.com'})
        assert_invariants(record)
        for step in (
            lambda: customers.update(record.pk, {'name': 'Globex Corp'}),
            lambda: customers.soft_delete(record.pk),
            lambda: customers.restore(record.pk),
            lambda: customers.soft_delete(record.pk),
        ):
            clock.advance(seconds=30)
            step()
            assert_invariants(Customer.all_objects.get(pk=record.pk))


@pytest.mark.django_db
class TestVisibility:
    """Default reads hide soft-deleted records."""

    def test_get_hides_deleted_unless_asked(self, customers, customer):
        customers.soft_delete(customer.pk)

        assert customers.get(customer.pk) is None
        found = customers.get(customer.pk, include_deleted=True)
        assert found is not None
        assert found.is_deleted is True

    def test_list_all_hides_deleted_unless_asked(self, customers, customer):
        other = customers.create({'name': 'Initech Software', 'email': 'it@initech.com'})
        customers.soft_delete(other.pk)

        assert [c.pk for c in customers.list_all()] == [customer.pk]
        assert {c.pk for c in customers.list_all(include_deleted=True)} == {customer.pk, other.pk}

    def test_store_visibility(self, customers, customer):
        store = ModelStore(Customer)
        customers.soft_delete(customer.pk)

        assert store.find_by_id(customer.pk) is None
        assert store.find_by_id(customer.pk, Visibility.INCLUDE_DELETED).pk == customer.pk
        assert store.find_all() == []
        assert Visibility.for_flag(True) is Visibility.INCLUDE_DELETED
        assert Visibility.for_flag(False) is Visibility.EXCLUDE_DELETED


@pytest.mark.django_db
class TestCaching:
    """Reads through the cache and invalidation on writes."""

    def test_second_get_is_served_from_cache(self, customers, customer):
        with mock.patch.object(customers.store, 'find_by_id', wraps=customers.store.find_by_id) as find:
            first = customers.get(customer.pk)
            second = customers.get(customer.pk)

            assert find.call_count == 1
            assert first.pk == second.pk == customer.pk

            customers.update(customer.pk, {'name': 'Acme Industries'})
            third = customers.get(customer.pk)

        assert third.name == 'Acme Industries'

    def test_soft_delete_invalidates_cached_record(self, customers, customer):
        assert customers.get(customer.pk) is not None
        assert cache.get(f'customer_{customer.pk}') is not None

        customers.soft_delete(customer.pk)

        assert cache.get(f'customer_{customer.pk}') is None
        assert customers.get(customer.pk) is None

    def test_restore_invalidates_cached_list(self, customers, customer):
        customers.soft_delete(customer.pk)
        assert customers.list_all() == []

        customers.restore(customer.pk)

        assert [c.pk for c in customers.list_all()] == [customer.pk]

    def test_create_invalidates_cached_list(self, customers, customer):
        assert len(customers.list_all()) == 1

        customers.create({'name': 'Umbrella Corporation', 'email': 'ops@umbrella.com'})

        assert len(customers.list_all()) == 2

    def test_include_deleted_bypasses_cache(self, customers, customer):
        customers.get(customer.pk)
        with mock.patch.object(customers.store, 'find_by_id', wraps=customers.store.find_by_id) as find:
            customers.get(customer.pk, include_deleted=True)

        assert find.call_count == 1

    def test_manager_without_cache(self, clock):
        manager = RecordLifecycleManager(Customer, clock=clock)
        record = manager.create({'name': 'Acme Corporation', 'email': 'contact@acme.com'})

        assert manager.get(record.pk).pk == record.pk
        assert cache.get(f'customer_{record.pk}') is None

    def test_record_cache_keys(self):
        records = RecordCache('invoice', timeout=60)

        assert records.key(7) == 'invoice_7'
        assert records.list_key == 'invoice_list'
        assert records.timeout == 60

    def test_lifecycle_for_uses_model_name_as_cache_kind(self):
        assert lifecycle_for(TelephoneNumber).cache.kind == 'telephonenumber'


@pytest.mark.django_db
class TestPurgeDeletedRecords:
    """Hard removal of long-deleted records."""

    def test_purges_expired_and_keeps_recent(self, customers, invoices, customer, clock):
        old = invoices.create({
            'customer': customer, 'invoice_number': 'INV-OLD',
            'amount': Decimal('10.00'), 'invoice_date': clock.now() - timedelta(days=30),
        })
        recent = invoices.create({
            'customer': customer, 'invoice_number': 'INV-NEW',
            'amount': Decimal('20.00'), 'invoice_date': clock.now() - timedelta(days=3),
        })
        invoices.soft_delete(old.pk)
        invoices.soft_delete(recent.pk)
        Invoice.all_objects.filter(pk=old.pk).update(
            deleted_at=clock.now() - timedelta(days=100)
        )

        purged = purge_deleted_records(retention_days=90)

        assert purged['invoices.Invoice'] == 1
        assert not Invoice.all_objects.filter(pk=old.pk).exists()
        assert Invoice.all_objects.filter(pk=recent.pk).exists()

    def test_keeps_parent_still_referenced(self, customers, invoices, customer, clock):
        invoices.create({
            'customer': customer, 'invoice_number': 'INV-KEEP',
            'amount': Decimal('10.00'), 'invoice_date': clock.now() - timedelta(days=3),
        })
        customers.soft_delete(customer.pk)
        Customer.all_objects.filter(pk=customer.pk).update(
            deleted_at=clock.now() - timedelta(days=100)
        )

        purged = purge_deleted_records(retention_days=90)

        assert purged['customers.Customer'] == 0
        assert Customer.all_objects.filter(pk=customer.pk).exists()


@pytest.mark.django_db
class TestHealthCheck:

    def test_health_check(self, client):
        response = client.get('/health/')
        assert response.status_code == 200
        assert response.json()['checks'] == {'database': 'ok', 'cache': 'ok'}

    def test_api_root(self, api_client):
        response = api_client.get('/api/')
        assert response.status_code == 200
        assert response.data['customers'].endswith('/api/v1/customers/')
