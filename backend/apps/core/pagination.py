"""Pagination shared by every record list endpoint."""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsPagination(PageNumberPagination):
    """
    Page-number pagination with page-size control.

    Adds total_pages to DRF's default envelope so clients don't need to
    recompute it from count and page_size.
    """
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'count': self.page.paginator.count,
            'total_pages': self.page.paginator.num_pages,
            'page': self.page.number,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        })

    def get_paginated_response_schema(self, schema):
        response_schema = super().get_paginated_response_schema(schema)
        response_schema['properties']['total_pages'] = {'type': 'integer', 'example': 5}
        response_schema['properties']['page'] = {'type': 'integer', 'example': 1}
        return response_schema
