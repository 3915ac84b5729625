"""
Argument lookups shared by the RBAC management commands.
"""
from uuid import UUID

from django.core.management.base import CommandError

from apps.rbac.models import User
from apps.tenants.models import Company


def find_user(value):
    """Find a user by email first, then by ID."""
    user = User.objects.by_email(value)
    if not user:
        try:
            user = User.objects.filter(id=UUID(value)).first()
        except (ValueError, AttributeError):
            pass
    if not user:
        raise CommandError(f'User not found: {value}')
    return user


def find_company(value):
    try:
        company = Company.objects.select_related('tenant').filter(id=UUID(value)).first()
    except (ValueError, AttributeError):
        company = None
    if not company:
        raise CommandError(f'Company not found: {value}')
    return company
