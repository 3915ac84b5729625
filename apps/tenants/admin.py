"""
Django admin configuration for tenants app.
"""
from django.contrib import admin
from .models import Tenant, Company


class CompanyInline(admin.TabularInline):
    model = Company
    extra = 0
    fields = ['name', 'legal_name', 'is_active']


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CompanyInline]


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'legal_name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'legal_name', 'tenant__name']
    raw_id_fields = ['tenant']
    readonly_fields = ['created_at', 'updated_at']
