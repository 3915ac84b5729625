"""
Management command to remove a user from a company.

The assignment is deactivated, not deleted.
"""
from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import BizhubException
from apps.rbac.services import RoleAssignmentService
from ._lookup import find_company, find_user


class Command(BaseCommand):
    help = "Deactivate a user's company-level role"

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

        try:
            assignment = RoleAssignmentService.remove_user_from_company(user.id, company.id)
        except BizhubException as e:
            raise CommandError(f'Failed to remove user: {e.message}')

        self.stdout.write(
            self.style.SUCCESS(
                f'✓ Removed {user.email} ({assignment.role}) from {company.name}'
            )
        )
