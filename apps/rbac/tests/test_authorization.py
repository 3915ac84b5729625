"""
Tests for AuthorizationService.

Tier one (OWNER/TENANT_ADMIN on the company's tenant) always wins, tier two
consults the permission matrix, and nothing crosses a tenant boundary.
"""
import uuid
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.audit.models import AuditLog
from apps.core.exceptions import DataIntegrityError, NotFoundError
from apps.rbac.matrix import ALL_PERMISSIONS, Permission, UserRole
from apps.rbac.models import TenantUser
from apps.rbac.services import ACTION_ROLE_ASSIGNED, AuthorizationService, RoleAssignmentService


@pytest.mark.django_db
class TestTierOneAccess:

    def test_owner_has_every_permission_on_every_company(self, owner, company, second_company):
        for target in (company, second_company):
            for permission in Permission:
                assert AuthorizationService.check(owner.id, target.id, permission) is True

    def test_tenant_admin_equals_owner(self, user, tenant, company):
        TenantUser.objects.create(tenant=tenant, user=user, role=UserRole.TENANT_ADMIN)

        assert AuthorizationService.list_permissions(user.id, company.id) == ALL_PERMISSIONS

    def test_tier_one_ignores_tier_two_state(self, owner, company):
        RoleAssignmentService.assign_user_to_company(owner.id, company.id, 'STAFF')
        access = AuthorizationService.resolve_access(owner.id, company.id)
        assert access.tier == 1
        assert access.role == UserRole.OWNER
        assert Permission.DELETE_DATA in access.permissions

        RoleAssignmentService.remove_user_from_company(owner.id, company.id)
        assert AuthorizationService.check(owner.id, company.id, Permission.MANAGE_SETTINGS) is True

    def test_inactive_tier_one_membership_grants_nothing(self, user, tenant, company):
        TenantUser.objects.create(tenant=tenant, user=user, role=UserRole.OWNER, is_active=False)

        assert AuthorizationService.list_permissions(user.id, company.id) == frozenset()

    def test_non_tier_one_membership_falls_through(self, user, tenant, company):
        TenantUser.objects.create(tenant=tenant, user=user, role=UserRole.ADMIN)

        access = AuthorizationService.resolve_access(user.id, company.id)

        assert access.tier == 0
        assert access.has_access is False

    def test_tenant_isolation(self, owner, other_company):
        access = AuthorizationService.resolve_access(owner.id, other_company.id)

        assert access.tier == 0
        assert access.tenant_id == other_company.tenant_id
        for permission in Permission:
            assert AuthorizationService.check(owner.id, other_company.id, permission) is False


@pytest.mark.django_db
class TestTierTwoAccess:

    def test_finance_end_to_end(self, user, company, second_company):
        """Assign FINANCE, check the matrix row, and find the audit record."""
        assert AuthorizationService.list_permissions(user.id, company.id) == frozenset()

        assignment = RoleAssignmentService.assign_user_to_company(user.id, company.id, 'FINANCE')

        assert AuthorizationService.check(user.id, company.id, Permission.APPROVE_TRANSACTIONS) is True
        assert AuthorizationService.check(user.id, company.id, Permission.DELETE_DATA) is False
        assert AuthorizationService.check(user.id, second_company.id, Permission.VIEW_DATA) is False
        assert AuditLog.objects.filter(
            action=ACTION_ROLE_ASSIGNED, entity_id=str(assignment.id),
        ).exists()

    def test_removed_user_loses_access(self, user, company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'WAREHOUSE')
        RoleAssignmentService.remove_user_from_company(user.id, company.id)

        assert AuthorizationService.check(user.id, company.id, Permission.VIEW_DATA) is False

    def test_role_scoped_to_its_company(self, user, company, other_company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'ADMIN')

        assert AuthorizationService.check(user.id, other_company.id, Permission.VIEW_DATA) is False

    def test_resolve_access_reports_role(self, user, company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'SALES')

        access = AuthorizationService.resolve_access(user.id, company.id)

        assert access.tier == 2
        assert access.role == 'SALES'
        assert access.tenant_id == company.tenant_id
        assert Permission.VIEW_REPORTS in access.permissions

    def test_any_and_all(self, user, company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'STAFF')

        assert AuthorizationService.has_any_permission(
            user.id, company.id, [Permission.EDIT_DATA, Permission.VIEW_DATA]) is True
        assert AuthorizationService.has_all_permissions(
            user.id, company.id, [Permission.EDIT_DATA, Permission.VIEW_DATA]) is False
        assert AuthorizationService.has_all_permissions(user.id, company.id, [Permission.VIEW_DATA]) is True


@pytest.mark.django_db
class TestResolveAccessEdgeCases:

    def test_unknown_company(self, user):
        with pytest.raises(NotFoundError):
            AuthorizationService.resolve_access(user.id, uuid.uuid4())

    def test_malformed_company_id(self, user):
        with pytest.raises(NotFoundError):
            AuthorizationService.check(user.id, 'nope', Permission.VIEW_DATA)

    def test_unknown_user_has_no_access(self, company):
        assert AuthorizationService.check(uuid.uuid4(), company.id, Permission.VIEW_DATA) is False
        assert AuthorizationService.check('garbage', company.id, Permission.VIEW_DATA) is False

    def test_store_failure_is_wrapped(self, user, company):
        with patch('apps.rbac.services.TenantUser.objects.tier_one', side_effect=DatabaseError('down')):
            with pytest.raises(DataIntegrityError) as exc_info:
                AuthorizationService.resolve_access(user.id, company.id)

        assert exc_info.value.details == {'operation': 'resolve_access'}


@pytest.mark.django_db
class TestCompanyAdminAndReach:

    def test_is_company_admin(self, owner, user, other_user, company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'ADMIN')
        RoleAssignmentService.assign_user_to_company(other_user.id, company.id, 'FINANCE')

        assert AuthorizationService.is_company_admin(owner.id, company.id) is True
        assert AuthorizationService.is_company_admin(user.id, company.id) is True
        assert AuthorizationService.is_company_admin(other_user.id, company.id) is False

    def test_owner_reaches_all_tenant_companies(self, owner, company, second_company, other_company):
        reachable = set(AuthorizationService.get_accessible_companies(owner.id))

        assert reachable == {company, second_company}

    def test_tier_two_reaches_assigned_companies(self, user, company, other_company, second_company):
        RoleAssignmentService.assign_user_to_company(user.id, company.id, 'STAFF')
        RoleAssignmentService.assign_user_to_company(user.id, other_company.id, 'SALES')

        reachable = set(AuthorizationService.get_accessible_companies(user.id))

        assert reachable == {company, other_company}

    def test_inactive_companies_excluded(self, owner, company, second_company):
        second_company.is_active = False
        second_company.save()

        assert list(AuthorizationService.get_accessible_companies(owner.id)) == [company]

    def test_no_reach_without_roles(self, user, company):
        assert not AuthorizationService.get_accessible_companies(user.id).exists()
