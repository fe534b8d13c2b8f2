"""
Customer model.

A customer owns invoices and telephone numbers through foreign keys on
those models; deleting a customer never cascades to them.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Sum

from apps.core.models import BaseModel, FieldError
from .policies import get_name_email_policy


class Customer(BaseModel):
    """Customer with a balance derived from its active invoices."""
    name = models.CharField(max_length=200, db_index=True)
    email = models.EmailField(max_length=200, unique=True)

    class Meta:
        db_table = 'customers'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_deleted', 'name']),
        ]

    def __str__(self):
        return self.name

    @property
    def balance(self):
        """Sum of the amounts of the customer's active invoices."""
        # Related managers use the default manager, so deleted invoices are excluded
        total = self.invoices.aggregate(total=Sum('amount'))['total']
        return total if total is not None else Decimal('0.00')

    def rule_violations(self, now):
        yield from super().rule_violations(now)

        if not (self.name or '').strip():
            yield FieldError('name', 'Name is required')
        if not (self.email or '').strip():
            yield FieldError('email', 'Email is required')
            return

        policy = get_name_email_policy()
        if (self.name or '').strip() and not policy.matches(self.name, self.email):
            yield FieldError('email', policy.message)
