"""
Tests for the RBAC management commands.
"""
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.audit.models import AuditLog
from apps.rbac.models import CompanyUserRole
from apps.rbac.services import ACTION_ROLE_ASSIGNED, ACTION_ROLE_REMOVED, RoleAssignmentService


def run(command, *args):
    out = StringIO()
    call_command(command, *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestAssignCompanyRole:

    def test_assign_by_email(self, user, company):
        output = run('assign_company_role', '--user', user.email, '--company', str(company.id), '--role', 'WAREHOUSE')

        assert 'Assigned WAREHOUSE' in output
        assert 'Granted permissions: 3' in output
        assert CompanyUserRole.objects.get(user=user, company=company).role == 'WAREHOUSE'
        assert AuditLog.objects.filter(action=ACTION_ROLE_ASSIGNED).exists()

    def test_assign_by_id(self, user, company):
        run('assign_company_role', '--user', str(user.id), '--company', str(company.id), '--role', 'STAFF')

        assert CompanyUserRole.objects.filter(user=user, company=company, is_active=True).exists()

    def test_tier_one_role_rejected(self, user, company):
        with pytest.raises(CommandError, match='tenant-level'):
            run('assign_company_role', '--user', user.email, '--company', str(company.id), '--role', 'OWNER')

    def test_unknown_user(self, company):
        with pytest.raises(CommandError, match='User not found'):
            run('assign_company_role', '--user', 'ghost@example.com', '--company', str(company.id), '--role', 'STAFF')

    def test_unknown_company(self, user):
        with pytest.raises(CommandError, match='Company not found'):
            run('assign_company_role', '--user', user.email, '--company', 'acme', '--role', 'STAFF')


@pytest.mark.django_db
class TestRemoveCompanyRole:

    def test_remove(self, user, company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'SALES')

        output = run('remove_company_role', '--user', user.email, '--company', str(company.id))

        assert 'Removed' in output
        assert CompanyUserRole.objects.get(user=user, company=company).is_active is False
        assert AuditLog.objects.filter(action=ACTION_ROLE_REMOVED, status=AuditLog.STATUS_SUCCESS).exists()

    def test_remove_without_assignment(self, user, company):
        with pytest.raises(CommandError, match='not found'):
            run('remove_company_role', '--user', user.email, '--company', str(company.id))


@pytest.mark.django_db
class TestShowPermissions:

    def test_company_role(self, user, company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'FINANCE')

        output = run('show_permissions', '--user', user.email, '--company', str(company.id))

        assert 'Access: company-level' in output
        assert 'Role: FINANCE' in output
        assert 'APPROVE_TRANSACTIONS' in output
        assert 'DELETE_DATA' not in output

    def test_owner(self, owner, company):
        output = run('show_permissions', '--user', owner.email, '--company', str(company.id))

        assert 'Access: tenant-wide' in output
        assert 'Permissions: 8' in output

    def test_no_access(self, user, company):
        output = run('show_permissions', '--user', user.email, '--company', str(company.id))

        assert 'Access: no access' in output
        assert 'No permissions granted' in output
