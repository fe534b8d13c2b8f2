"""Customer admin configuration."""

from django.contrib import admin

from apps.core.admin import AUDIT_FIELDS, LifecycleAdmin
from apps.invoices.models import Invoice
from apps.telephone_numbers.models import TelephoneNumber
from .models import Customer


class InvoiceInline(admin.TabularInline):
    """Read-only inline for a customer's invoices."""
    model = Invoice
    fields = ['invoice_number', 'amount', 'invoice_date', 'is_deleted']
    readonly_fields = fields
    extra = 0
    can_delete = False


class TelephoneNumberInline(admin.TabularInline):
    """Read-only inline for a customer's phone numbers."""
    model = TelephoneNumber
    fields = ['type', 'number', 'is_deleted']
    readonly_fields = fields
    extra = 0
    can_delete = False


@admin.register(Customer)
class CustomerAdmin(LifecycleAdmin):
    """Customer admin with invoices and phone numbers inline."""
    list_display = ['name', 'email', 'is_deleted', 'created_at', 'modified_at']
    search_fields = ['name', 'email']
    ordering = ['name']
    inlines = [InvoiceInline, TelephoneNumberInline]
    readonly_fields = ['name', 'email'] + AUDIT_FIELDS
