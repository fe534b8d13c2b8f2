"""Telephone number serializers."""

from rest_framework import serializers

from apps.customers.models import Customer
from .models import TelephoneNumber


class TelephoneNumberSerializer(serializers.ModelSerializer):
    """Telephone number with audit fields."""

    class Meta:
        model = TelephoneNumber
        fields = [
            'id', 'customer', 'type', 'number',
            'is_deleted', 'deleted_at', 'created_at', 'modified_at',
        ]
        read_only_fields = fields


class TelephoneNumberWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating telephone numbers."""
    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())

    class Meta:
        model = TelephoneNumber
        fields = ['customer', 'type', 'number']

    def to_representation(self, instance):
        return TelephoneNumberSerializer(instance, context=self.context).data
