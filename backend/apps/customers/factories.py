"""Customer test/seed data factories."""

import factory
from django.utils.text import slugify

from apps.core.factories import LifecycleModelFactory
from .models import Customer


class CustomerFactory(LifecycleModelFactory):
    class Meta:
        model = Customer

    name = factory.Faker('company')
    # The company name is in the domain, which satisfies the name/email policy
    email = factory.LazyAttributeSequence(
        lambda o, n: f"contact{n}@{slugify(o.name).replace('-', '')}.example.com"
    )
