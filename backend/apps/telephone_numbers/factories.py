"""Telephone number test/seed data factories."""

import factory
from factory import fuzzy

from apps.core.factories import LifecycleModelFactory
from apps.customers.factories import CustomerFactory
from .models import TelephoneNumber


class TelephoneNumberFactory(LifecycleModelFactory):
    class Meta:
        model = TelephoneNumber

    customer = factory.SubFactory(CustomerFactory)
    type = fuzzy.FuzzyChoice(TelephoneNumber.Type.values)
    number = factory.Faker('numerify', text='+44 7### ######')
