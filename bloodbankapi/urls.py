"""bloodbankapi URL Configuration

The JSON API lives under ``/api/``; the Django admin stays at ``/admin/``.
Routes carry no trailing slash so the browser client's paths match as-is.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('donor.urls')),
    path('api/', include('blood.urls')),
]
