"""
Django admin site configuration.
"""
from django.contrib import admin


admin.site.site_header = "Bizhub Administration"
admin.site.site_title = "Bizhub Admin"
admin.site.index_title = "Tenants, roles and audit trail"
