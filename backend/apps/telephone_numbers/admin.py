"""Telephone number admin configuration."""

from django.contrib import admin

from apps.core.admin import AUDIT_FIELDS, LifecycleAdmin
from .models import TelephoneNumber


@admin.register(TelephoneNumber)
class TelephoneNumberAdmin(LifecycleAdmin):
    """Telephone number admin."""
    list_display = ['number', 'type', 'customer', 'is_deleted']
    list_filter = ['is_deleted', 'type']
    search_fields = ['number', 'customer__name']
    list_select_related = ['customer']
    readonly_fields = ['customer', 'type', 'number'] + AUDIT_FIELDS
