"""
URL configuration demonstrating best practices:
- API versioning
- Proper URL namespacing
- Admin URL customization for security
- Health check endpoint
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from apps.core.views import health_check, api_root

# Customize admin URL for security (configure in production settings)
admin_url = getattr(settings, 'ADMIN_URL', 'admin/')

urlpatterns = [
    # Admin
    path(admin_url, admin.site.urls),

    # Health check
    path('health/', health_check, name='health-check'),

    # API root
    path('api/', api_root, name='api-root'),

    # API v1
    path('api/v1/', include([
        path('customers/', include('apps.customers.urls')),
        path('invoices/', include('apps.invoices.urls')),
        path('telephone-numbers/', include('apps.telephone_numbers.urls')),
    ])),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    urlpatterns += [
        path('__debug__/', include('debug_toolbar.urls')),
    ]

# Customize admin site
admin.site.site_header = 'Customer Records Administration'
admin.site.site_title = 'Customer Records Admin'
admin.site.index_title = 'Customers, invoices and telephone numbers'
