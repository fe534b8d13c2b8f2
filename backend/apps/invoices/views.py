"""Invoice views."""

from rest_framework import viewsets

from apps.core.views import LifecycleViewSetMixin
from .models import Invoice
from .serializers import InvoiceSerializer, InvoiceWriteSerializer


class InvoiceViewSet(LifecycleViewSetMixin, viewsets.ModelViewSet):
    """
    Invoice ViewSet.

    Features:
    - Soft delete and restore
    - Filter by customer, search by invoice number
    - Ordering by date or amount
    """
    model = Invoice
    filterset_fields = ['customer']
    search_fields = ['invoice_number']
    ordering_fields = ['invoice_date', 'amount', 'created_at']
    ordering = ['-invoice_date']

    def get_queryset(self):
        return super().get_queryset().select_related('customer')

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return InvoiceWriteSerializer
        return InvoiceSerializer
