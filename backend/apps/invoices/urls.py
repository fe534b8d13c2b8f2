"""
Invoice URLs using ViewSet router.

Best practice: Use routers for ViewSet-based views.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import InvoiceViewSet

app_name = 'invoices'

router = DefaultRouter()
router.register(r'', InvoiceViewSet, basename='invoice')

urlpatterns = [
    path('', include(router.urls)),
]
