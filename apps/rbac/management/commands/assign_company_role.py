"""
Management command to assign a company-level role to a user.

Creates the assignment, or updates and reactivates the existing one. The
change is written to the audit trail like any other assignment.
"""
from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import BizhubException
from apps.rbac.matrix import TIER_TWO_ROLES, permissions_for
from apps.rbac.services import RoleAssignmentService
from ._lookup import find_company, find_user


class Command(BaseCommand):
    help = 'Assign a company-level role (ADMIN, FINANCE, SALES, WAREHOUSE, STAFF) to a user'

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
        parser.add_argument(
            '--role',
            type=str,
            required=True,
            help=f"One of: {', '.join(sorted(TIER_TWO_ROLES))}",
        )

    def handle(self, *args, **options):
        user = find_user(options['user'])
        company = find_company(options['company'])

        self.stdout.write(f'User: {user.email}')
        self.stdout.write(f'Company: {company.name} (tenant {company.tenant.name})')

        try:
            assignment = RoleAssignmentService.assign_user_to_company(
                user.id, company.id, options['role'],
            )
        except BizhubException as e:
            raise CommandError(f'Failed to assign role: {e.message}')

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✓ Assigned {assignment.role} to {user.email} in {company.name}'
            )
        )

        granted = sorted(permissions_for(assignment.role))
        self.stdout.write(f'\nGranted permissions: {len(granted)}')
        for permission in granted:
            self.stdout.write(f'  • {permission}')
