"""
URL configuration for CoachDesk project.

URLs are declared at the project level, not per app.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('config.api.urls')),
]
