"""
Customer views demonstrating best practices:
- Writes routed through the record lifecycle
- Aggregates computed in the database
- Filtering and search
- Custom actions
"""

from decimal import Decimal, InvalidOperation

from django.db.models import Prefetch, Sum
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.views import TRUE_VALUES, LifecycleViewSetMixin
from apps.invoices.models import Invoice
from apps.invoices.serializers import InvoiceSerializer
from apps.telephone_numbers.models import TelephoneNumber
from .filters import CustomerFilter, with_balance
from .models import Customer
from .serializers import (
    CustomerDetailSerializer,
    CustomerSerializer,
    CustomerSummarySerializer,
    CustomerWriteSerializer,
    format_money,
)

DEFAULT_LARGE_BALANCE = Decimal('10000')


class CustomerViewSet(LifecycleViewSetMixin, viewsets.ModelViewSet):
    """
    ViewSet for customers.

    Features:
    - Soft delete and restore
    - Balance annotation on lists
    - Filtering by name, email and minimum balance
    - Balance report and lifecycle statistics
    - ?include_related=true embeds active invoices and phone numbers
    """
    model = Customer
    filterset_class = CustomerFilter
    search_fields = ['name', 'email']
    ordering_fields = ['name', 'email', 'created_at', 'modified_at', 'balance_total']
    ordering = ['name']

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list':
            queryset = with_balance(queryset)
            if self.include_related:
                # One query per relation, not one joined row per invoice/phone pair
                queryset = queryset.prefetch_related(
                    Prefetch('invoices', queryset=Invoice.objects.select_related('customer')),
                    Prefetch('phone_numbers', queryset=TelephoneNumber.objects.all()),
                )
        return queryset

    @property
    def include_related(self):
        return self.request.query_params.get('include_related', '').lower() in TRUE_VALUES

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return CustomerWriteSerializer
        if self.include_related and self.action in ['list', 'retrieve', 'all_records']:
            return CustomerDetailSerializer
        return CustomerSerializer

    @action(detail=True, methods=['get'])
    def invoices(self, request, pk=None):
        """
        Active invoices of a customer.

        Endpoint: /api/v1/customers/{id}/invoices/
        """
        customer = self.get_object()
        queryset = Invoice.objects.filter(customer_id=customer.pk).select_related('customer')
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = InvoiceSerializer(page, many=True, context={'request': request})
            return self.get_paginated_response(serializer.data)
        serializer = InvoiceSerializer(queryset, many=True, context={'request': request})
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def with_large_balance(self, request):
        """
        Customers whose active invoices add up to at least min_balance.

        Endpoint: /api/v1/customers/with_large_balance/?min_balance=10000
        """
        raw = request.query_params.get('min_balance')
        try:
            min_balance = Decimal(raw) if raw is not None else DEFAULT_LARGE_BALANCE
        except InvalidOperation:
            return Response(
                {'error': 'min_balance must be a number'},
                status=status.HTTP_400_BAD_REQUEST
            )

        queryset = (
            with_balance(Customer.objects.all())
            .filter(balance_total__gte=min_balance)
            .order_by('-balance_total', 'name')
        )
        serializer = CustomerSummarySerializer(queryset, many=True)

        return Response({
            'min_balance': str(min_balance),
            'customer_count': len(serializer.data),
            'customers': serializer.data,
        })

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """
        Active/deleted counts per record kind and invoice totals.

        Endpoint: /api/v1/customers/stats/
        """
        def counts(model):
            active = model.objects.count()
            deleted = model.all_objects.filter(is_deleted=True).count()
            return {'active': active, 'deleted': deleted, 'total': active + deleted}

        total_amount = Invoice.objects.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

        return Response({
            'customers': counts(Customer),
            'invoices': counts(Invoice),
            'telephone_numbers': counts(TelephoneNumber),
            'total_invoice_amount': format_money(total_amount),
        })
