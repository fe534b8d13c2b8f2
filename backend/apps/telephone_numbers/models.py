"""Telephone number model."""

import string

from django.conf import settings
from django.db import models

from apps.core.models import BaseModel, FieldError


class TelephoneNumber(BaseModel):
    """A customer's phone number of a given type."""

    class Type(models.TextChoices):
        MOBILE = 'Mobile', 'Mobile'
        WORK = 'Work', 'Work'
        DIRECT_DIAL = 'DirectDial', 'Direct dial'

    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='phone_numbers'
    )
    type = models.CharField(max_length=20, choices=Type.choices, db_index=True)
    number = models.CharField(max_length=50)

    class Meta:
        db_table = 'telephone_numbers'
        ordering = ['customer', 'type']
        indexes = [
            models.Index(fields=['customer', 'is_deleted']),
        ]

    def __str__(self):
        return f"{self.get_type_display()}: {self.number}"

    @property
    def digit_count(self):
        return sum(1 for ch in self.number or '' if ch in string.digits)

    def rule_violations(self, now):
        yield from super().rule_violations(now)

        if self.customer_id is None:
            yield FieldError('customer', 'Customer is required')

        if self.type not in self.Type.values:
            yield FieldError('type', f"Type must be one of: {', '.join(self.Type.values)}")

        # Subsumed by the minimum-digit rule below, kept as its own check
        if self.type == self.Type.MOBILE and self.digit_count == 0:
            yield FieldError('number', 'Mobile numbers must contain at least one digit')

        min_digits = settings.RECORDS['MIN_PHONE_DIGITS']
        if self.digit_count < min_digits:
            yield FieldError('number', f'Phone number must contain at least {min_digits} digits')
