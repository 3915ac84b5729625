"""
URL configuration for Bizhub.

Business-entity APIs mount their own routes; this project only exposes the
Django admin, where tenants, companies, role assignments and the read-only
audit trail can be inspected.
"""
from django.contrib import admin
from django.urls import path

urlpatterns = [
    path('admin/', admin.site.urls),
]
