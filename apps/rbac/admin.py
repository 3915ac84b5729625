"""
Django admin configuration for RBAC app.
"""
from django.contrib import admin
from .models import User, TenantUser, CompanyUserRole


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """
    Admin for the email-based User model.

    Passwords are set through ``User.set_password``; the hash is shown read-only.
    """
    list_display = ['email', 'first_name', 'last_name', 'is_active', 'is_superuser', 'created_at']
    list_filter = ['is_active', 'is_superuser', 'created_at']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['-created_at']

    fieldsets = (
        (None, {
            'fields': ('email', 'password_hash')
        }),
        ('Personal Info', {
            'fields': ('first_name', 'last_name')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_superuser')
        }),
        ('Activity', {
            'fields': ('last_login', 'created_at', 'updated_at')
        }),
    )
    readonly_fields = ['password_hash', 'created_at', 'updated_at', 'last_login']


@admin.register(TenantUser)
class TenantUserAdmin(admin.ModelAdmin):
    """Tenant memberships; OWNER and TENANT_ADMIN grant tenant-wide access."""
    list_display = ['user', 'tenant', 'role', 'is_active', 'created_at']
    list_filter = ['role', 'is_active']
    search_fields = ['user__email', 'tenant__name', 'tenant__slug']
    raw_id_fields = ['user', 'tenant']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(CompanyUserRole)
class CompanyUserRoleAdmin(admin.ModelAdmin):
    """
    Read-only view of company-level assignments.

    Changes go through RoleAssignmentService (or the assign_company_role and
    remove_company_role commands) so every change is audited.
    """
    list_display = ['user', 'company', 'tenant', 'role', 'is_active', 'updated_at']
    list_filter = ['role', 'is_active']
    search_fields = ['user__email', 'company__name']
    readonly_fields = ['user', 'company', 'tenant', 'role', 'is_active', 'created_at', 'updated_at', 'deleted_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
