"""Invoice serializers."""

from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from apps.customers.models import Customer
from .models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    """Invoice with owning customer name and audit fields."""
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'customer', 'customer_name', 'invoice_number',
            'amount', 'invoice_date',
            'is_deleted', 'deleted_at', 'created_at', 'modified_at',
        ]
        read_only_fields = fields


class InvoiceWriteSerializer(serializers.ModelSerializer):
    """
    Serializer for creating/updating invoices.

    Amount and date rules are checked by the record lifecycle so that all
    violations come back together.
    """
    # Only active customers can receive invoices
    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())
    invoice_number = serializers.CharField(
        max_length=50,
        validators=[UniqueValidator(
            queryset=Invoice.all_objects.all(),
            message='An invoice with this number already exists.'
        )]
    )

    class Meta:
        model = Invoice
        fields = ['customer', 'invoice_number', 'amount', 'invoice_date']

    def to_representation(self, instance):
        return InvoiceSerializer(instance, context=self.context).data
