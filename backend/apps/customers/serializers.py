"""
Customer serializers demonstrating best practices:
- Separate read and write serializers
- Read-only computed and audit fields
- Uniqueness checked against deleted records too
- Opt-in nested related records
"""

from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from apps.invoices.serializers import InvoiceSerializer
from apps.telephone_numbers.serializers import TelephoneNumberSerializer
from .models import Customer

MONEY_FIELD = serializers.DecimalField(max_digits=18, decimal_places=2)


def format_money(value):
    """Render an amount with two decimal places whatever scale the database returned."""
    return MONEY_FIELD.to_representation(value)


class CustomerSerializer(serializers.ModelSerializer):
    """Customer with balance and audit fields."""
    balance = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'email', 'balance',
            'is_deleted', 'deleted_at', 'created_at', 'modified_at',
        ]
        read_only_fields = fields

    def get_balance(self, obj):
        # List querysets annotate the balance; single records compute it
        total = getattr(obj, 'balance_total', None)
        if total is None:
            total = obj.balance
        return format_money(total)


class CustomerDetailSerializer(CustomerSerializer):
    """Customer with its active invoices and telephone numbers embedded."""
    invoices = InvoiceSerializer(many=True, read_only=True)
    phone_numbers = TelephoneNumberSerializer(many=True, read_only=True)

    class Meta(CustomerSerializer.Meta):
        fields = CustomerSerializer.Meta.fields + ['invoices', 'phone_numbers']
        read_only_fields = fields


class CustomerSummarySerializer(serializers.ModelSerializer):
    """Compact customer row for balance reports."""
    balance = serializers.DecimalField(
        source='balance_total', max_digits=18, decimal_places=2, read_only=True
    )
    invoice_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'name', 'email', 'balance', 'invoice_count', 'created_at', 'modified_at']


class CustomerWriteSerializer(serializers.ModelSerializer):
    """
    Serializer for creating/updating customers.

    Best practice: only writeable fields here; the response is rendered
    with CustomerSerializer.
    """
    name = serializers.CharField(min_length=2, max_length=200)
    email = serializers.EmailField(
        max_length=200,
        validators=[UniqueValidator(
            queryset=Customer.all_objects.all(),
            message='A customer with this email already exists.'
        )]
    )

    class Meta:
        model = Customer
        fields = ['name', 'email']

    def to_representation(self, instance):
        return CustomerSerializer(instance, context=self.context).data
