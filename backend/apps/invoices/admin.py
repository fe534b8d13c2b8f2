"""Invoice admin configuration."""

from django.contrib import admin

from apps.core.admin import AUDIT_FIELDS, LifecycleAdmin
from .models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(LifecycleAdmin):
    """Invoice admin."""
    list_display = ['invoice_number', 'customer', 'amount', 'invoice_date', 'is_deleted']
    list_filter = ['is_deleted', 'invoice_date']
    search_fields = ['invoice_number', 'customer__name']
    list_select_related = ['customer']
    readonly_fields = ['customer', 'invoice_number', 'amount', 'invoice_date'] + AUDIT_FIELDS
