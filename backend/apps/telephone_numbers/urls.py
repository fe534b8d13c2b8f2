"""
Telephone number URLs using ViewSet router.

Best practice: Use routers for ViewSet-based views.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import TelephoneNumberViewSet

app_name = 'telephone_numbers'

router = DefaultRouter()
router.register(r'', TelephoneNumberViewSet, basename='telephone-number')

urlpatterns = [
    path('', include(router.urls)),
]
