"""Customer filtering and balance annotations."""

from decimal import Decimal

import django_filters
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from .models import Customer

ACTIVE_INVOICES = Q(invoices__is_deleted=False)


def with_balance(queryset):
    """Annotate balance_total and invoice_count from active invoices."""
    return queryset.annotate(
        balance_total=Coalesce(
            Sum('invoices__amount', filter=ACTIVE_INVOICES),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=18, decimal_places=2),
        ),
        invoice_count=Count('invoices', filter=ACTIVE_INVOICES),
    )


class CustomerFilter(django_filters.FilterSet):
    """
    Each parameter adds one condition; absent parameters add none.

    - name / email: case-insensitive contains
    - min_balance: balance (active invoices) at least this amount
    """
    name = django_filters.CharFilter(lookup_expr='icontains')
    email = django_filters.CharFilter(lookup_expr='icontains')
    min_balance = django_filters.NumberFilter(method='filter_min_balance')

    class Meta:
        model = Customer
        fields = ['name', 'email', 'min_balance']

    def filter_min_balance(self, queryset, name, value):
        if 'balance_total' not in queryset.query.annotations:
            queryset = with_balance(queryset)
        return queryset.filter(balance_total__gte=value)
