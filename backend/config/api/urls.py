"""
API URL configuration for CoachDesk.
"""
from django.urls import path

from .views import health_check
from .viewsets import ClientsViewSet, CheckinsViewSet, InsightsViewSet

urlpatterns = [
    path('health/', health_check, name='health-check'),

    # Clients
    path('clients', ClientsViewSet.as_view({'get': 'list', 'post': 'create'}), name='clients'),
    path('clients/<str:client_id>', ClientsViewSet.as_view({'get': 'retrieve'}), name='client-detail'),

    # Check-ins (versioned list cache, idempotent upsert)
    path(
        'clients/<str:client_id>/checkins',
        CheckinsViewSet.as_view({'get': 'list', 'post': 'create'}),
        name='client-checkins'
    ),

    # Insights (async computation)
    path(
        'clients/<str:client_id>/insights',
        InsightsViewSet.as_view({'get': 'list', 'post': 'create'}),
        name='client-insights'
    ),
]
