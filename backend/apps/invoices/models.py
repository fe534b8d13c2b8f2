"""
Invoice model demonstrating best practices:
- Decimal fields for money
- Protected foreign key to the owning customer
- Date-window validation against the lifecycle clock
"""

from django.conf import settings
from django.db import models

from apps.core.models import BaseModel, FieldError

INVOICE_NUMBER_PREFIX = 'INV'


def years_before(moment, years):
    """Same calendar day `years` earlier; Feb 29 falls back to Feb 28."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


class Invoice(BaseModel):
    """
    Invoice issued to a customer.

    Important fields:
    - DecimalField for amount (never use FloatField for money!)
    - invoice_number unique across every invoice, deleted ones included
    """
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    invoice_number = models.CharField(max_length=50, unique=True)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    invoice_date = models.DateTimeField(db_index=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-invoice_date']
        indexes = [
            models.Index(fields=['customer', 'is_deleted']),
        ]

    def __str__(self):
        return self.invoice_number

    def rule_violations(self, now):
        yield from super().rule_violations(now)

        if self.customer_id is None:
            yield FieldError('customer', 'Customer is required')

        if not (self.invoice_number or '').strip():
            yield FieldError('invoice_number', 'Invoice number is required')
        elif not self.invoice_number.startswith(INVOICE_NUMBER_PREFIX):
            yield FieldError(
                'invoice_number',
                f"Invoice number must start with '{INVOICE_NUMBER_PREFIX}'"
            )

        if self.amount is None or self.amount <= 0:
            yield FieldError('amount', 'Amount must be greater than zero')

        if self.invoice_date is None:
            yield FieldError('invoice_date', 'Invoice date is required')
        else:
            max_age_years = settings.RECORDS['INVOICE_MAX_AGE_YEARS']
            if self.invoice_date > now:
                yield FieldError('invoice_date', 'Invoice date cannot be in the future')
            elif self.invoice_date < years_before(now, max_age_years):
                yield FieldError(
                    'invoice_date',
                    f'Invoice date cannot be more than {max_age_years} years in the past'
                )
