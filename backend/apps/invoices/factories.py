"""Invoice test/seed data factories."""

from datetime import timezone

import factory
from factory import fuzzy

from apps.core.factories import LifecycleModelFactory
from apps.customers.factories import CustomerFactory
from .models import Invoice


class InvoiceFactory(LifecycleModelFactory):
    class Meta:
        model = Invoice

    customer = factory.SubFactory(CustomerFactory)
    invoice_number = factory.Sequence(lambda n: f"INV-{n:06d}")
    amount = fuzzy.FuzzyDecimal(10, 5000, precision=2)
    invoice_date = factory.Faker(
        'date_time_between', start_date='-2y', end_date='-1d', tzinfo=timezone.utc
    )
