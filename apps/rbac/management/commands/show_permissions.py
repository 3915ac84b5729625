"""
Management command to show what a user can do on a company.
"""
from django.core.management.base import BaseCommand

from apps.rbac.services import AuthorizationService
from ._lookup import find_company, find_user

TIER_LABELS = {
    0: 'no access',
    1: 'tenant-wide',
    2: 'company-level',
}


class Command(BaseCommand):
    help = 'Show the resolved access tier, role and permissions of a user on a company'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            type=str,
            required=True,
            help='User email address or ID',
        )
        parser.add_argument(
            '--company',
            type=str,
            required=True,
            help='Company ID',
        )

    def handle(self, *args, **options):
        user = find_user(options['user'])
        company = find_company(options['company'])

        access = AuthorizationService.resolve_access(user.id, company.id)

        self.stdout.write(f'User: {user.email}')
        self.stdout.write(f'Company: {company.name} (tenant {company.tenant.name})')
        self.stdout.write(f'Access: {TIER_LABELS[access.tier]}')

        if not access.has_access:
            self.stdout.write(self.style.WARNING('\nNo permissions granted'))
            return

        self.stdout.write(f'Role: {access.role}')
        permissions = sorted(access.permissions)
        self.stdout.write(f'\nPermissions: {len(permissions)}')
        for permission in permissions:
            self.stdout.write(f'  • {permission}')
