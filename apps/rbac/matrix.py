"""
Roles, permissions and the fixed company-level permission matrix.

Two tiers of roles exist:

    TENANT LEVEL (tier one)
    ├── OWNER          - unrestricted access to every company of the tenant
    └── TENANT_ADMIN   - same access as OWNER

    COMPANY LEVEL (tier two)
    ├── ADMIN          - every permission within one company
    ├── FINANCE        - view/create/edit, approve transactions, reports
    ├── SALES          - view/create/edit, reports
    ├── WAREHOUSE      - view/create/edit
    └── STAFF          - view only

Tier-one roles never consult the matrix. Any role the matrix does not know
maps to the empty permission set.
"""
from types import MappingProxyType
from django.db import models


class UserRole(models.TextChoices):
    OWNER = 'OWNER', 'Owner'
    TENANT_ADMIN = 'TENANT_ADMIN', 'Tenant Admin'
    ADMIN = 'ADMIN', 'Admin'
    FINANCE = 'FINANCE', 'Finance'
    SALES = 'SALES', 'Sales'
    WAREHOUSE = 'WAREHOUSE', 'Warehouse'
    STAFF = 'STAFF', 'Staff'


class Permission(models.TextChoices):
    VIEW_DATA = 'VIEW_DATA', 'View data'
    CREATE_DATA = 'CREATE_DATA', 'Create data'
    EDIT_DATA = 'EDIT_DATA', 'Edit data'
    DELETE_DATA = 'DELETE_DATA', 'Delete data'
    APPROVE_TRANSACTIONS = 'APPROVE_TRANSACTIONS', 'Approve transactions'
    MANAGE_USERS = 'MANAGE_USERS', 'Manage users'
    VIEW_REPORTS = 'VIEW_REPORTS', 'View reports'
    MANAGE_SETTINGS = 'MANAGE_SETTINGS', 'Manage settings'


TIER_ONE_ROLES = frozenset({UserRole.OWNER, UserRole.TENANT_ADMIN})

TIER_TWO_ROLES = frozenset({
    UserRole.ADMIN,
    UserRole.FINANCE,
    UserRole.SALES,
    UserRole.WAREHOUSE,
    UserRole.STAFF,
})

ALL_PERMISSIONS = frozenset(Permission)

PERMISSION_MATRIX = MappingProxyType({
    UserRole.ADMIN: ALL_PERMISSIONS,
    UserRole.FINANCE: frozenset({
        Permission.VIEW_DATA,
        Permission.CREATE_DATA,
        Permission.EDIT_DATA,
        Permission.APPROVE_TRANSACTIONS,
        Permission.VIEW_REPORTS,
    }),
    UserRole.SALES: frozenset({
        Permission.VIEW_DATA,
        Permission.CREATE_DATA,
        Permission.EDIT_DATA,
        Permission.VIEW_REPORTS,
    }),
    UserRole.WAREHOUSE: frozenset({
        Permission.VIEW_DATA,
        Permission.CREATE_DATA,
        Permission.EDIT_DATA,
    }),
    UserRole.STAFF: frozenset({
        Permission.VIEW_DATA,
    }),
})


def is_tier_one(role) -> bool:
    return role in TIER_ONE_ROLES


def is_tier_two(role) -> bool:
    return role in TIER_TWO_ROLES


def permissions_for(role) -> frozenset:
    """All permissions a company-level role grants; empty for unknown roles."""
    try:
        return PERMISSION_MATRIX.get(role, frozenset())
    except TypeError:
        # Unhashable input is not a role
        return frozenset()


def has_permission(role, permission) -> bool:
    """Whether a company-level role grants ``permission``."""
    return permission in permissions_for(role)
