"""
Core views: health check, API root and the shared lifecycle viewset plumbing.
"""

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.utils.functional import cached_property
from rest_framework import status
from rest_framework.decorators import action, api_view
from rest_framework.response import Response
from rest_framework.reverse import reverse

from .exceptions import NotFoundError
from .lifecycle import lifecycle_for
from .stores import ModelStore, Visibility

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def health_check(request):
    """
    Health check endpoint for monitoring.

    Checks:
    - Database connectivity
    - Redis/Cache connectivity

    Returns appropriate HTTP status codes:
    - 200: All systems operational
    - 503: Service unavailable (database or cache down)
    """
    health_status = {
        'status': 'healthy',
        'checks': {}
    }

    # Check database
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        health_status['checks']['database'] = 'ok'
    except Exception as e:
        health_status['checks']['database'] = 'error'
        health_status['status'] = 'unhealthy'
        health_status['checks']['database_error'] = str(e)

    # Check Redis/Cache
    try:
        cache.set('health_check', 'ok', 10)
        if cache.get('health_check') == 'ok':
            health_status['checks']['cache'] = 'ok'
        else:
            health_status['checks']['cache'] = 'error'
            health_status['status'] = 'unhealthy'
    except Exception as e:
        health_status['checks']['cache'] = 'error'
        health_status['status'] = 'unhealthy'
        health_status['checks']['cache_error'] = str(e)

    status_code = 200 if health_status['status'] == 'healthy' else 503

    return JsonResponse(health_status, status=status_code)


@api_view(['GET'])
def api_root(request, format=None):
    """
    API root endpoint listing the record collections.
    """
    return Response({
        'customers': reverse('customers:customer-list', request=request, format=format),
        'invoices': reverse('invoices:invoice-list', request=request, format=format),
        'telephone_numbers': reverse('telephone_numbers:telephone-number-list', request=request, format=format),
        'health': reverse('health-check', request=request, format=format),
    })


class LifecycleViewSetMixin:
    """
    Routes ModelViewSet reads and writes through the record lifecycle.

    - Lists read the store's queryset under the requested visibility
    - Detail reads use the cached lifecycle get()
    - DELETE soft-deletes; POST {id}/restore/ restores
    - ?include_deleted=true is the only way to see deleted records
    """
    model = None
    lookup_value_regex = r'\d+'

    @cached_property
    def lifecycle(self):
        return lifecycle_for(self.model)

    @property
    def include_deleted(self):
        return self.request.query_params.get('include_deleted', '').lower() in TRUE_VALUES

    def get_queryset(self):
        return ModelStore(self.model).queryset(Visibility.for_flag(self.include_deleted))

    def get_object(self):
        pk = self.kwargs[self.lookup_url_kwarg or self.lookup_field]
        record = self.lifecycle.get(pk, include_deleted=self.include_deleted)
        if record is None:
            raise NotFoundError(f"{self.lifecycle.label} {pk} not found")
        self.check_object_permissions(self.request, record)
        return record

    def perform_create(self, serializer):
        serializer.instance = self.lifecycle.create(serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = self.lifecycle.update(
            serializer.instance.pk,
            serializer.validated_data
        )

    def destroy(self, request, *args, **kwargs):
        """Soft delete; a second delete is a conflict, not a silent success."""
        self.lifecycle.soft_delete(kwargs[self.lookup_url_kwarg or self.lookup_field])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        """
        Restore a soft-deleted record.

        Endpoint: /api/v1/<records>/{id}/restore/
        """
        record = self.lifecycle.restore(pk)
        serializer = self.get_serializer(record)
        return Response(serializer.data)

    @action(detail=False, methods=['get'], url_path='all')
    def all_records(self, request):
        """
        Every record of this kind, unpaginated and cached.

        Endpoint: /api/v1/<records>/all/
        """
        records = self.lifecycle.list_all(include_deleted=self.include_deleted)
        serializer = self.get_serializer(records, many=True)
        return Response(serializer.data)
