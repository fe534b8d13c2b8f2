"""
Admin base for lifecycle-managed records.

Best practices:
- Show deleted records too, with a filter to tell them apart
- Read-only change views; writes go through the API and its validation
- Soft delete and restore as bulk actions instead of hard delete
"""

from django.contrib import admin, messages

from .exceptions import RecordError
from .lifecycle import lifecycle_for

AUDIT_FIELDS = ['is_deleted', 'deleted_at', 'created_at', 'modified_at']


class LifecycleAdmin(admin.ModelAdmin):
    """Admin for BaseModel subclasses."""
    list_filter = ['is_deleted', 'created_at']
    actions = ['soft_delete_selected', 'restore_selected']

    def get_queryset(self, request):
        return self.model.all_objects.get_queryset()

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def _run_transition(self, request, queryset, transition, verb):
        lifecycle = lifecycle_for(self.model)
        done = 0
        for pk in queryset.values_list('pk', flat=True):
            try:
                getattr(lifecycle, transition)(pk)
                done += 1
            except RecordError as e:
                self.message_user(request, str(e), level=messages.WARNING)
        self.message_user(request, f'{done} record(s) {verb}.', level=messages.SUCCESS)

    @admin.action(description='Soft delete selected records')
    def soft_delete_selected(self, request, queryset):
        self._run_transition(request, queryset, 'soft_delete', 'soft deleted')

    @admin.action(description='Restore selected records')
    def restore_selected(self, request, queryset):
        self._run_transition(request, queryset, 'restore', 'restored')
