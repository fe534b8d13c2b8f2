"""Telephone number views."""

from rest_framework import viewsets

from apps.core.views import LifecycleViewSetMixin
from .models import TelephoneNumber
from .serializers import TelephoneNumberSerializer, TelephoneNumberWriteSerializer


class TelephoneNumberViewSet(LifecycleViewSetMixin, viewsets.ModelViewSet):
    """Telephone numbers, filterable by customer and type."""
    model = TelephoneNumber
    filterset_fields = ['customer', 'type']
    search_fields = ['number']
    ordering_fields = ['type', 'created_at']
    ordering = ['customer', 'type']

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return TelephoneNumberWriteSerializer
        return TelephoneNumberSerializer
