"""
Tests for telephone numbers.
"""

import pytest

from apps.core.exceptions import ValidationError
from apps.core.lifecycle import RecordLifecycleManager
from apps.customers.factories import CustomerFactory
from .factories import TelephoneNumberFactory
from .models import TelephoneNumber


@pytest.fixture
def phones(clock):
    return RecordLifecycleManager(TelephoneNumber, clock=clock)


@pytest.fixture
def customer():
    return CustomerFactory()


@pytest.mark.django_db
class TestTelephoneNumberRules:

    def test_short_number_rejected_then_full_number_accepted(self, phones, customer):
        with pytest.raises(ValidationError) as excinfo:
            phones.create({'customer': customer, 'type': 'Mobile', 'number': '123'})

        assert excinfo.value.errors == [
            ('number', 'Phone number must contain at least 8 digits'),
        ]

        phone = phones.create({'customer': customer, 'type': 'Mobile', 'number': '+1-234-567-8901'})
        assert phone.pk is not None
        assert phone.digit_count == 11

    def test_mobile_without_digits_reports_both_rules(self, phones, customer):
        with pytest.raises(ValidationError) as excinfo:
            phones.create({'customer': customer, 'type': 'Mobile', 'number': 'NO-DIGITS-HERE'})

        messages = [e.message for e in excinfo.value.errors]
        assert messages == [
            'Mobile numbers must contain at least one digit',
            'Phone number must contain at least 8 digits',
        ]

    def test_work_number_needs_eight_digits(self, phones, customer):
        with pytest.raises(ValidationError) as excinfo:
            phones.create({'customer': customer, 'type': 'Work', 'number': 'Extension-ABC'})

        assert [e.message for e in excinfo.value.errors] == [
            'Phone number must contain at least 8 digits',
        ]

    def test_unknown_type_rejected(self, phones, customer):
        with pytest.raises(ValidationError) as excinfo:
            phones.create({'customer': customer, 'type': 'Fax', 'number': '020 7946 0018'})

        assert excinfo.value.fields == ['type']

    def test_missing_customer_is_a_validation_error(self, phones):
        with pytest.raises(ValidationError) as excinfo:
            phones.create({'type': 'Work', 'number': '020 7946 0018'})

        assert excinfo.value.errors == [('customer', 'Customer is required')]
        assert TelephoneNumber.all_objects.count() == 0

    def test_direct_dial_accepted(self, phones, customer):
        phone = phones.create({'customer': customer, 'type': 'DirectDial', 'number': '020 7946 0018'})
        assert phone.get_type_display() == 'Direct dial'

    def test_non_ascii_digits_are_not_counted(self, customer):
        phone = TelephoneNumber(customer=customer, type='Work', number='٠١٢٣٤٥٦٧')
        assert phone.digit_count == 0

    def test_update_revalidates_number(self, phones, customer):
        phone = phones.create({'customer': customer, 'type': 'Work', 'number': '020 7946 0018'})

        with pytest.raises(ValidationError):
            phones.update(phone.pk, {'number': '555'})

        assert TelephoneNumber.objects.get(pk=phone.pk).number == '020 7946 0018'


@pytest.mark.django_db
class TestTelephoneNumberAPI:

    def test_create(self, api_client, customer):
        response = api_client.post('/api/v1/telephone-numbers/', {
            'customer': customer.pk,
            'type': 'Mobile',
            'number': '+1-234-567-8901',
        }, format='json')

        assert response.status_code == 201
        assert response.data['type'] == 'Mobile'
        assert response.data['is_deleted'] is False

    def test_invalid_choice_rejected_by_serializer(self, api_client, customer):
        response = api_client.post('/api/v1/telephone-numbers/', {
            'customer': customer.pk,
            'type': 'Pager',
            'number': '+1-234-567-8901',
        }, format='json')

        assert response.status_code == 400
        assert 'type' in response.data

    def test_short_number_returns_field_errors(self, api_client, customer):
        response = api_client.post('/api/v1/telephone-numbers/', {
            'customer': customer.pk,
            'type': 'Mobile',
            'number': '123',
        }, format='json')

        assert response.status_code == 400
        assert response.data['errors'] == [
            {'field': 'number', 'message': 'Phone number must contain at least 8 digits'},
        ]

    def test_filter_by_type(self, api_client, customer):
        TelephoneNumberFactory(customer=customer, type='Mobile')
        TelephoneNumberFactory(customer=customer, type='Work')

        response = api_client.get('/api/v1/telephone-numbers/', {'type': 'Work'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['type'] == 'Work'

    def test_soft_delete_and_restore(self, api_client, customer):
        phone = TelephoneNumberFactory(customer=customer)
        url = f'/api/v1/telephone-numbers/{phone.pk}/'

        assert api_client.delete(url).status_code == 204
        assert list(customer.phone_numbers.all()) == []

        response = api_client.post(f'{url}restore/')
        assert response.status_code == 200
        assert [p.pk for p in customer.phone_numbers.all()] == [phone.pk]
