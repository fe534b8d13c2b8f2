"""
Tests for customers.

Covers the name/email policy, balances, filters, custom actions and
the seed command.
"""

from datetime import timedelta
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.core.exceptions import ValidationError
from apps.core.lifecycle import RecordLifecycleManager
from apps.invoices.factories import InvoiceFactory
from apps.invoices.models import Invoice
from apps.telephone_numbers.factories import TelephoneNumberFactory
from apps.telephone_numbers.models import TelephoneNumber
from .factories import CustomerFactory
from .models import Customer
from .policies import SubstringNameEmailCorrelation, get_name_email_policy


@pytest.fixture
def customers(clock):
    return RecordLifecycleManager(Customer, clock=clock)


class TestNameEmailPolicy:
    """The policy is plain Python; no database needed."""

    @pytest.fixture
    def policy(self):
        return SubstringNameEmailCorrelation(min_overlap=4, test_domains=['test.com', 'example.com'])

    @pytest.mark.parametrize('email', [
        'contact@acmecorporation.com',
        'sales@acme.io',
        'billing@corporation.net',
        'anyone@test.com',
        'anyone@example.com',
        'anyone@sandbox.example.com',
    ])
    def test_accepted(self, policy, email):
        assert policy.matches('Acme Corporation', email)

    @pytest.mark.parametrize('email', [
        'contact@wrongdomain.com',
        'contact@acm.com',
        'contact@notexample.com',
        'no-at-sign',
    ])
    def test_rejected(self, policy, email):
        assert not policy.matches('Acme Corporation', email)

    def test_short_names_need_a_test_domain(self, policy):
        assert not policy.matches('IBM', 'info@ibm.com')
        assert policy.matches('IBM', 'info@test.com')

    def test_punctuation_in_name_is_ignored(self, policy):
        assert policy.matches("O'Reilly & Sons", 'books@oreilly.com')

    def test_configured_policy(self):
        assert isinstance(get_name_email_policy(), SubstringNameEmailCorrelation)


@pytest.mark.django_db
class TestCustomerRules:

    def test_matching_domain_accepted(self, customers):
        customer = customers.create({'name': 'Acme Corporation', 'email': 'contact@acmecorporation.example.com'})
        assert customer.pk is not None

    def test_unrelated_domain_rejected(self, customers):
        with pytest.raises(ValidationError) as excinfo:
            customers.create({'name': 'Acme Corporation', 'email': 'contact@wrongdomain.com'})

        assert excinfo.value.errors == [
            ('email', 'Email domain should relate to the customer name'),
        ]

    def test_missing_email_is_a_validation_error(self, customers):
        with pytest.raises(ValidationError) as excinfo:
            customers.create({'name': 'Acme Corporation'})

        assert excinfo.value.errors == [('email', 'Email is required')]
        assert Customer.all_objects.count() == 0

    def test_blank_name_is_a_validation_error(self, customers):
        with pytest.raises(ValidationError) as excinfo:
            customers.create({'name': '  ', 'email': 'contact@acme.com'})

        assert excinfo.value.errors == [('name', 'Name is required')]

    def test_test_domain_accepted(self, customers):
        customer = customers.create({'name': 'Acme Corporation', 'email': 'contact@test.com'})
        assert customer.pk is not None

    def test_balance_sums_active_invoices(self, customers, clock):
        customer = customers.create({'name': 'Acme Corporation', 'email': 'contact@acme.com'})
        InvoiceFactory(customer=customer, amount=Decimal('100.25'))
        InvoiceFactory(customer=customer, amount=Decimal('300.24'))
        deleted = InvoiceFactory(customer=customer, amount=Decimal('999.00'))
        RecordLifecycleManager(Invoice, clock=clock).soft_delete(deleted.pk)

        assert customer.balance == Decimal('400.49')

    def test_balance_without_invoices_is_zero(self):
        assert CustomerFactory().balance == Decimal('0.00')

    def test_factory_emails_pass_policy(self):
        for customer in CustomerFactory.create_batch(5):
            assert get_name_email_policy().matches(customer.name, customer.email)


@pytest.mark.django_db
class TestCustomerAPI:

    def test_create_customer(self, api_client):
        response = api_client.post('/api/v1/customers/', {
            'name': 'Acme Corporation',
            'email': 'contact@acmecorporation.com',
        }, format='json')

        assert response.status_code == 201
        assert response.data['balance'] == '0.00'
        assert response.data['is_deleted'] is False
        assert response.data['created_at'] == response.data['modified_at']

    def test_create_with_unrelated_email(self, api_client):
        response = api_client.post('/api/v1/customers/', {
            'name': 'Acme Corporation',
            'email': 'contact@wrongdomain.com',
        }, format='json')

        assert response.status_code == 400
        assert response.data['errors'][0]['field'] == 'email'

    def test_email_unique_across_deleted_customers(self, api_client):
        customer = CustomerFactory()
        api_client.delete(f'/api/v1/customers/{customer.pk}/')

        response = api_client.post('/api/v1/customers/', {
            'name': customer.name,
            'email': customer.email,
        }, format='json')

        assert response.status_code == 400
        assert 'email' in response.data

    def test_retrieve_includes_balance(self, api_client):
        customer = CustomerFactory()
        InvoiceFactory(customer=customer, amount=Decimal('12.50'))

        response = api_client.get(f'/api/v1/customers/{customer.pk}/')

        assert response.status_code == 200
        assert response.data['balance'] == '12.50'

    def test_list_annotates_balance_and_hides_deleted(self, api_client):
        kept = CustomerFactory()
        gone = CustomerFactory()
        InvoiceFactory(customer=kept, amount=Decimal('40.00'))
        api_client.delete(f'/api/v1/customers/{gone.pk}/')

        response = api_client.get('/api/v1/customers/')
        rows = response.data['results']
        assert [row['id'] for row in rows] == [kept.pk]
        assert rows[0]['balance'] == '40.00'

        response = api_client.get('/api/v1/customers/', {'include_deleted': 'true'})
        assert {row['id'] for row in response.data['results']} == {kept.pk, gone.pk}

    def test_all_endpoint(self, api_client):
        first, second = CustomerFactory(), CustomerFactory()
        api_client.delete(f'/api/v1/customers/{second.pk}/')

        response = api_client.get('/api/v1/customers/all/')
        assert [row['id'] for row in response.data] == [first.pk]

        response = api_client.get('/api/v1/customers/all/', {'include_deleted': '1'})
        assert {row['id'] for row in response.data} == {first.pk, second.pk}

    def test_min_balance_filter(self, api_client):
        rich = CustomerFactory()
        poor = CustomerFactory()
        InvoiceFactory(customer=rich, amount=Decimal('4000.00'))
        InvoiceFactory(customer=poor, amount=Decimal('20.00'))

        response = api_client.get('/api/v1/customers/', {'min_balance': '1000'})

        assert [row['id'] for row in response.data['results']] == [rich.pk]

    def test_with_large_balance(self, api_client):
        rich = CustomerFactory()
        InvoiceFactory(customer=rich, amount=Decimal('4000.00'))
        InvoiceFactory(customer=rich, amount=Decimal('4000.00'))
        InvoiceFactory(customer=rich, amount=Decimal('3000.00'))
        CustomerFactory()

        response = api_client.get('/api/v1/customers/with_large_balance/')

        assert response.status_code == 200
        assert response.data['min_balance'] == '10000'
        assert response.data['customer_count'] == 1
        assert response.data['customers'][0]['id'] == rich.pk
        assert response.data['customers'][0]['balance'] == '11000.00'
        assert response.data['customers'][0]['invoice_count'] == 3

    def test_with_large_balance_bad_input(self, api_client):
        response = api_client.get('/api/v1/customers/with_large_balance/', {'min_balance': 'lots'})
        assert response.status_code == 400

    def test_customer_invoices(self, api_client, clock):
        customer = CustomerFactory()
        kept = InvoiceFactory(customer=customer)
        gone = InvoiceFactory(customer=customer)
        RecordLifecycleManager(Invoice, clock=clock).soft_delete(gone.pk)

        response = api_client.get(f'/api/v1/customers/{customer.pk}/invoices/')

        assert response.status_code == 200
        assert [row['id'] for row in response.data['results']] == [kept.pk]

    def test_stats(self, api_client, clock):
        customer = CustomerFactory()
        InvoiceFactory(customer=customer, amount=Decimal('10.00'))
        gone = InvoiceFactory(customer=customer, amount=Decimal('5.00'))
        RecordLifecycleManager(Invoice, clock=clock).soft_delete(gone.pk)

        response = api_client.get('/api/v1/customers/stats/')

        assert response.data['customers'] == {'active': 1, 'deleted': 0, 'total': 1}
        assert response.data['invoices'] == {'active': 1, 'deleted': 1, 'total': 2}
        assert response.data['telephone_numbers']['total'] == 0
        assert response.data['total_invoice_amount'] == '10.00'

    def test_stats_total_has_two_decimal_places(self, api_client):
        customer = CustomerFactory()
        InvoiceFactory(customer=customer, amount=Decimal('7'))
        InvoiceFactory(customer=customer, amount=Decimal('3'))

        response = api_client.get('/api/v1/customers/stats/')
        assert response.data['total_invoice_amount'] == '10.00'

    def test_stats_without_invoices(self, api_client):
        response = api_client.get('/api/v1/customers/stats/')
        assert response.data['total_invoice_amount'] == '0.00'

    def test_list_without_include_related_has_no_nested_records(self, api_client):
        CustomerFactory()

        row = api_client.get('/api/v1/customers/').data['results'][0]

        assert 'invoices' not in row
        assert 'phone_numbers' not in row

    def test_list_include_related_embeds_active_children(self, api_client, clock):
        customer = CustomerFactory()
        kept = InvoiceFactory(customer=customer)
        gone = InvoiceFactory(customer=customer)
        RecordLifecycleManager(Invoice, clock=clock).soft_delete(gone.pk)
        phone = TelephoneNumberFactory(customer=customer)

        response = api_client.get('/api/v1/customers/', {'include_related': 'true'})

        row = response.data['results'][0]
        assert [invoice['id'] for invoice in row['invoices']] == [kept.pk]
        assert row['invoices'][0]['invoice_number'] == kept.invoice_number
        assert [p['id'] for p in row['phone_numbers']] == [phone.pk]

    def test_retrieve_include_related(self, api_client):
        customer = CustomerFactory()
        invoice = InvoiceFactory(customer=customer)

        response = api_client.get(f'/api/v1/customers/{customer.pk}/', {'include_related': '1'})

        assert response.status_code == 200
        assert [row['id'] for row in response.data['invoices']] == [invoice.pk]
        assert response.data['phone_numbers'] == []

    def test_update_customer(self, api_client):
        customer = CustomerFactory(name='Acme Corporation', email='contact@acme.com')

        response = api_client.patch(
            f'/api/v1/customers/{customer.pk}/', {'name': 'Acme Industries'}, format='json'
        )

        assert response.status_code == 200
        assert response.data['name'] == 'Acme Industries'
        assert Customer.objects.get(pk=customer.pk).name == 'Acme Industries'

    def test_soft_deleted_customer_keeps_its_invoices(self, api_client):
        customer = CustomerFactory()
        invoice = InvoiceFactory(customer=customer)

        api_client.delete(f'/api/v1/customers/{customer.pk}/')

        assert Invoice.objects.filter(pk=invoice.pk).exists()


@pytest.mark.django_db
class TestSeedRecordsCommand:

    def test_seed_creates_requested_counts(self):
        out = StringIO()
        call_command(
            'seed_records', customers=3, min_invoices=2, max_invoices=2,
            min_phones=1, max_phones=1, seed=42, stdout=out
        )

        assert Customer.objects.count() == 3
        assert Invoice.objects.count() == 6
        assert TelephoneNumber.objects.count() == 3
        assert 'Created 3 customers, 6 invoices and 3 telephone numbers' in out.getvalue()

    def test_seeded_records_are_valid(self, clock):
        call_command('seed_records', customers=2, seed=7, stdout=StringIO())

        for model in (Customer, Invoice, TelephoneNumber):
            for record in model.objects.all():
                assert list(record.rule_violations(clock.now() + timedelta(minutes=1))) == []

    def test_invalid_range(self):
        with pytest.raises(CommandError):
            call_command('seed_records', customers=1, min_invoices=3, max_invoices=1, stdout=StringIO())
