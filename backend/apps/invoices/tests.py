"""
Tests for invoices.
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.cache import RecordCache
from apps.core.exceptions import ValidationError
from apps.core.lifecycle import RecordLifecycleManager
from apps.customers.factories import CustomerFactory
from apps.customers.models import Customer
from .factories import InvoiceFactory
from .models import Invoice, years_before


@pytest.fixture
def invoices(clock):
    return RecordLifecycleManager(Invoice, clock=clock, cache=RecordCache('invoice'))


@pytest.fixture
def customer():
    return CustomerFactory()


def invoice_fields(customer, clock, **overrides):
    fields = {
        'customer': customer,
        'invoice_number': 'INV-001',
        'amount': Decimal('100.00'),
        'invoice_date': clock.now() - timedelta(days=1),
    }
    fields.update(overrides)
    return fields


@pytest.mark.django_db
class TestInvoiceRules:
    """Invoice-specific validation."""

    def test_negative_amount_rejected_then_valid_amount_accepted(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create(invoice_fields(customer, clock, amount=Decimal('-5')))

        assert excinfo.value.fields == ['amount']
        assert excinfo.value.errors[0].message == 'Amount must be greater than zero'

        invoice = invoices.create(invoice_fields(customer, clock, amount=Decimal('100')))
        assert invoice.pk is not None
        assert invoice.amount == Decimal('100')
        assert invoice.is_deleted is False

    def test_zero_amount_rejected(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create(invoice_fields(customer, clock, amount=Decimal('0.00')))

        assert excinfo.value.fields == ['amount']

    def test_future_invoice_date_rejected(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create(invoice_fields(customer, clock, invoice_date=clock.now() + timedelta(days=1)))

        assert excinfo.value.errors[0].message == 'Invoice date cannot be in the future'

    def test_invoice_date_older_than_ten_years_rejected(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create(invoice_fields(
                customer, clock, invoice_date=years_before(clock.now(), 10) - timedelta(hours=1)
            ))

        assert excinfo.value.errors[0].message == 'Invoice date cannot be more than 10 years in the past'

    def test_invoice_date_inside_window_accepted(self, invoices, customer, clock):
        invoice = invoices.create(invoice_fields(
            customer, clock, invoice_date=years_before(clock.now(), 10) + timedelta(hours=1)
        ))
        assert invoice.pk is not None

    def test_leap_days_do_not_shrink_the_window(self, invoices, customer, clock):
        # Ten calendar years always hold at least two leap days
        invoice = invoices.create(invoice_fields(
            customer, clock, invoice_date=clock.now() - timedelta(days=365 * 10 + 1)
        ))
        assert invoice.pk is not None

    def test_ten_year_horizon_uses_calendar_years(self):
        moment = datetime(2026, 10, 18, 12, 0, tzinfo=dt_timezone.utc)
        assert years_before(moment, 10) == datetime(2016, 10, 18, 12, 0, tzinfo=dt_timezone.utc)

        leap_day = datetime(2024, 2, 29, tzinfo=dt_timezone.utc)
        assert years_before(leap_day, 10) == datetime(2014, 2, 28, tzinfo=dt_timezone.utc)

    def test_blank_invoice_number_rejected(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create(invoice_fields(customer, clock, invoice_number='  '))

        assert excinfo.value.errors == [('invoice_number', 'Invoice number is required')]

    def test_invoice_number_must_start_with_inv(self, invoices, customer, clock):
        with pytest.raises(ValidationError) as excinfo:
            invoices.create(invoice_fields(customer, clock, invoice_number='BILL-001'))

        assert excinfo.value.errors == [
            ('invoice_number', "Invoice number must start with 'INV'"),
        ]

    def test_missing_invoice_date_is_a_validation_error(self, invoices, customer, clock):
        fields = invoice_fields(customer, clock)
        del fields['invoice_date']

        with pytest.raises(ValidationError) as excinfo:
            invoices.create(fields)

        assert excinfo.value.errors == [('invoice_date', 'Invoice date is required')]
        assert Invoice.all_objects.count() == 0

    def test_missing_customer_is_a_validation_error(self, invoices, customer, clock):
        fields = invoice_fields(customer, clock)
        del fields['customer']

        with pytest.raises(ValidationError) as excinfo:
            invoices.create(fields)

        assert excinfo.value.errors == [('customer', 'Customer is required')]
        assert Invoice.all_objects.count() == 0

    def test_update_checks_amount(self, invoices, customer, clock):
        invoice = invoices.create(invoice_fields(customer, clock))

        with pytest.raises(ValidationError):
            invoices.update(invoice.pk, {'amount': Decimal('-1')})

        assert Invoice.objects.get(pk=invoice.pk).amount == Decimal('100.00')

    def test_factory_builds_valid_invoices(self, customer):
        invoice = InvoiceFactory(customer=customer)

        assert invoice.amount > 0
        assert invoice.is_deleted is False
        assert invoice.customer_id == customer.pk

    def test_soft_deleted_invoice_hidden_from_customer(self, invoices, customer, clock):
        invoice = invoices.create(invoice_fields(customer, clock))
        invoices.soft_delete(invoice.pk)

        assert list(customer.invoices.all()) == []
        assert Invoice.all_objects.filter(customer=customer).count() == 1


@pytest.mark.django_db
class TestInvoiceAPI:
    """Invoice endpoints."""

    def payload(self, customer, **overrides):
        data = {
            'customer': customer.pk,
            'invoice_number': 'INV-API-001',
            'amount': '250.00',
            'invoice_date': (timezone.now() - timedelta(days=30)).isoformat(),
        }
        data.update(overrides)
        return data

    def test_create_invoice(self, api_client, customer):
        response = api_client.post('/api/v1/invoices/', self.payload(customer), format='json')

        assert response.status_code == 201
        assert response.data['amount'] == '250.00'
        assert response.data['customer_name'] == customer.name
        assert response.data['is_deleted'] is False
        assert response.data['deleted_at'] is None

    def test_invalid_invoice_returns_all_errors(self, api_client, customer):
        response = api_client.post(
            '/api/v1/invoices/',
            self.payload(customer, amount='-5.00', invoice_date='2999-01-01T00:00:00Z'),
            format='json'
        )

        assert response.status_code == 400
        fields = sorted(error['field'] for error in response.data['errors'])
        assert fields == ['amount', 'invoice_date']

    def test_invoice_number_prefix_checked(self, api_client, customer):
        response = api_client.post(
            '/api/v1/invoices/', self.payload(customer, invoice_number='BILL-9'), format='json'
        )

        assert response.status_code == 400
        assert response.data['errors'] == [
            {'field': 'invoice_number', 'message': "Invoice number must start with 'INV'"},
        ]

    def test_duplicate_invoice_number_rejected(self, api_client, customer):
        InvoiceFactory(customer=customer, invoice_number='INV-API-001')

        response = api_client.post('/api/v1/invoices/', self.payload(customer), format='json')

        assert response.status_code == 400
        assert 'invoice_number' in response.data

    def test_cannot_invoice_deleted_customer(self, api_client, customer):
        Customer.objects.filter(pk=customer.pk).update(is_deleted=True, deleted_at=customer.created_at)

        response = api_client.post('/api/v1/invoices/', self.payload(customer), format='json')

        assert response.status_code == 400
        assert 'customer' in response.data

    def test_delete_restore_cycle(self, api_client, customer):
        invoice = InvoiceFactory(customer=customer)
        url = f'/api/v1/invoices/{invoice.pk}/'

        assert api_client.delete(url).status_code == 204
        assert api_client.get(url).status_code == 404

        response = api_client.get(url, {'include_deleted': 'true'})
        assert response.status_code == 200
        assert response.data['is_deleted'] is True
        assert response.data['deleted_at'] is not None

        second = api_client.delete(url)
        assert second.status_code == 409
        assert 'already deleted' in second.data['detail']

        restored = api_client.post(f'{url}restore/')
        assert restored.status_code == 200
        assert restored.data['is_deleted'] is False
        assert restored.data['deleted_at'] is None

        assert api_client.post(f'{url}restore/').status_code == 409

    def test_list_excludes_deleted_by_default(self, api_client, customer):
        kept = InvoiceFactory(customer=customer)
        gone = InvoiceFactory(customer=customer)
        api_client.delete(f'/api/v1/invoices/{gone.pk}/')

        response = api_client.get('/api/v1/invoices/')
        assert [row['id'] for row in response.data['results']] == [kept.pk]

        response = api_client.get('/api/v1/invoices/', {'include_deleted': 'true'})
        assert {row['id'] for row in response.data['results']} == {kept.pk, gone.pk}

    def test_filter_by_customer(self, api_client, customer):
        InvoiceFactory(customer=customer)
        InvoiceFactory()

        response = api_client.get('/api/v1/invoices/', {'customer': customer.pk})

        assert response.data['count'] == 1
        assert response.data['results'][0]['customer'] == customer.pk

    def test_update_invoice(self, api_client, customer):
        invoice = InvoiceFactory(customer=customer, amount=Decimal('10.00'))

        response = api_client.patch(
            f'/api/v1/invoices/{invoice.pk}/', {'amount': '75.50'}, format='json'
        )

        assert response.status_code == 200
        assert response.data['amount'] == '75.50'
        assert response.data['modified_at'] >= response.data['created_at']

    def test_missing_invoice_is_404(self, api_client):
        assert api_client.get('/api/v1/invoices/999999/').status_code == 404
        assert api_client.delete('/api/v1/invoices/999999/').status_code == 404
