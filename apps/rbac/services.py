"""
RBAC services.

Implements:
- RoleAssignmentService: company-level (tier two) role assignments
- AuthorizationService: tier-one/tier-two precedence and permission checks
"""
import logging
import uuid
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from apps.audit.context import AuditContext
from apps.audit.services import AuditService
from apps.core.exceptions import DataIntegrityError, NotFoundError, ValidationError
from apps.rbac.matrix import (
    ALL_PERMISSIONS, TIER_ONE_ROLES, UserRole, is_tier_one, is_tier_two, permissions_for,
)
from apps.rbac.models import CompanyUserRole, TenantUser, User
from apps.tenants.models import Company

logger = logging.getLogger(__name__)

ENTITY_TYPE_COMPANY_ROLE = 'USER_COMPANY_ROLE'

ACTION_ROLE_ASSIGNED = 'USER_COMPANY_ROLE_ASSIGNED'
ACTION_ROLE_UPDATED = 'USER_COMPANY_ROLE_UPDATED'
ACTION_ROLE_REACTIVATED = 'USER_COMPANY_ROLE_REACTIVATED'
ACTION_ROLE_REMOVED = 'USER_COMPANY_ROLE_REMOVED'


def _parse_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _require_uuid(value, label):
    parsed = _parse_uuid(value)
    if parsed is None:
        raise NotFoundError(f"{label} not found")
    return parsed


@dataclass(frozen=True)
class CompanyUserInfo:
    """A company member with minimal display data."""
    user_id: uuid.UUID
    user_name: str
    user_email: str
    role: str
    is_active: bool


@dataclass(frozen=True)
class CompanyAccess:
    """
    Resolved access of one user to one company.

    tier is 1 for tenant-wide access, 2 for a company-level role and 0 for
    no access.
    """
    company_id: uuid.UUID
    tenant_id: uuid.UUID
    tier: int
    role: Optional[str] = None

    @property
    def has_access(self) -> bool:
        return self.tier in (1, 2)

    @property
    def permissions(self) -> FrozenSet[str]:
        if self.tier == 1:
            return ALL_PERMISSIONS
        if self.tier == 2:
            return permissions_for(self.role)
        return frozenset()


class RoleAssignmentService:
    """
    Service for company-level role assignments.

    Every mutation writes an audit record after its transaction commits.
    Rejected attempts are recorded with status FAILED before the error
    propagates.
    """

    @classmethod
    def validate_role(cls, role) -> str:
        """Return the canonical company-level role or raise ValidationError."""
        if not role:
            raise ValidationError("role is required")
        role = str(role)
        if is_tier_one(role):
            raise ValidationError(
                f"{role} is a tenant-level role and cannot be assigned per company"
            )
        if not is_tier_two(role):
            raise ValidationError(
                "invalid role: must be ADMIN, FINANCE, SALES, WAREHOUSE, or STAFF"
            )
        return UserRole(role).value

    @classmethod
    def assign_user_to_company(cls, user_id, company_id, role,
                               context: Optional[AuditContext] = None) -> CompanyUserRole:
        """
        Assign a company-level role to a user (upsert on user + company).

        An existing row, active or not, is updated and reactivated; otherwise
        a new row is created with the company's tenant.

        Raises:
            ValidationError: role is missing, unknown or tenant-level
            NotFoundError: user or company does not exist
            DataIntegrityError: the store failed
        """
        context = context or AuditContext()
        try:
            role = cls.validate_role(role)
            user = cls._get_user(user_id)
            company = cls._get_company(company_id)
        except (ValidationError, NotFoundError) as e:
            AuditService.record_failure(
                ACTION_ROLE_ASSIGNED, ENTITY_TYPE_COMPANY_ROLE, f"{user_id}:{company_id}",
                e.message, context=context,
            )
            raise

        context = context.scoped_to(tenant_id=company.tenant_id, company_id=company.id)
        try:
            assignment, previous = cls._upsert(user, company, role)
        except DatabaseError as e:
            logger.error(
                "Failed to assign user to company",
                extra={'user_id': str(user.id), 'company_id': str(company.id), 'tenant_id': str(company.tenant_id)},
                exc_info=True
            )
            AuditService.record_failure(
                ACTION_ROLE_ASSIGNED, ENTITY_TYPE_COMPANY_ROLE, f"{user.id}:{company.id}",
                f"store error: {e}", context=context,
            )
            raise DataIntegrityError(
                "failed to assign user to company",
                details={'operation': 'assign_user_to_company'},
            ) from e

        if previous is None:
            AuditService.record(
                ACTION_ROLE_ASSIGNED, ENTITY_TYPE_COMPANY_ROLE, assignment.id, context=context,
                new_values={
                    'user_id': str(user.id),
                    'user_email': user.email,
                    'company_id': str(company.id),
                    'role': role,
                    'is_active': True,
                },
                notes=f"User {user.email} assigned to company {company.name} as {role}",
            )
        elif not previous['is_active']:
            AuditService.record(
                ACTION_ROLE_REACTIVATED, ENTITY_TYPE_COMPANY_ROLE, assignment.id, context=context,
                old_values=previous,
                new_values={'role': role, 'is_active': True},
                notes=f"User {user.email} reactivated in company {company.name} with role "
                      f"changed from {previous['role']} to {role}",
            )
        else:
            AuditService.record(
                ACTION_ROLE_UPDATED, ENTITY_TYPE_COMPANY_ROLE, assignment.id, context=context,
                old_values=previous,
                new_values={'role': role, 'is_active': True},
                notes=f"Role changed from {previous['role']} to {role}",
            )

        logger.info(
            f"Company role {role} assigned",
            extra={'user_id': str(user.id), 'company_id': str(company.id), 'tenant_id': str(company.tenant_id)}
        )
        return assignment

    @classmethod
    def _upsert(cls, user, company, role):
        """
        Create or update the (user, company) row under a row lock.

        Returns (assignment, previous) where previous is None for a new row,
        else the prior role and active flag.
        """
        rows = CompanyUserRole.objects_with_deleted.select_for_update()
        with transaction.atomic():
            existing = rows.filter(user=user, company=company).first()
            if existing is None:
                try:
                    with transaction.atomic():
                        assignment = CompanyUserRole.objects.create(
                            user=user, company=company, role=role, is_active=True,
                        )
                    return assignment, None
                except IntegrityError:
                    # A concurrent request inserted the same pair first
                    existing = rows.get(user=user, company=company)

            previous = {
                'role': existing.role,
                'is_active': existing.is_active and existing.deleted_at is None,
            }
            existing.role = role
            existing.is_active = True
            existing.deleted_at = None
            existing.save(update_fields=['role', 'is_active', 'deleted_at', 'updated_at'])
            return existing, previous

    @classmethod
    def remove_user_from_company(cls, user_id, company_id,
                                 context: Optional[AuditContext] = None) -> CompanyUserRole:
        """
        Deactivate a user's company-level role. The row is kept for history.

        Raises:
            NotFoundError: no active assignment exists for the pair
            DataIntegrityError: the store failed
        """
        context = context or AuditContext()
        try:
            with transaction.atomic():
                assignment = CompanyUserRole.objects.select_for_update().filter(
                    user_id=_require_uuid(user_id, 'user-company assignment'),
                    company_id=_require_uuid(company_id, 'user-company assignment'),
                    is_active=True,
                ).first()
                if assignment is None:
                    raise NotFoundError("user-company assignment not found")
                assignment.is_active = False
                assignment.save(update_fields=['is_active', 'updated_at'])
        except NotFoundError as e:
            AuditService.record_failure(
                ACTION_ROLE_REMOVED, ENTITY_TYPE_COMPANY_ROLE, f"{user_id}:{company_id}",
                e.message, context=context,
            )
            raise
        except DatabaseError as e:
            logger.error(
                "Failed to remove user from company",
                extra={'user_id': str(user_id), 'company_id': str(company_id)},
                exc_info=True
            )
            AuditService.record_failure(
                ACTION_ROLE_REMOVED, ENTITY_TYPE_COMPANY_ROLE, f"{user_id}:{company_id}",
                f"store error: {e}", context=context,
            )
            raise DataIntegrityError(
                "failed to remove user from company",
                details={'operation': 'remove_user_from_company'},
            ) from e

        AuditService.record(
            ACTION_ROLE_REMOVED, ENTITY_TYPE_COMPANY_ROLE, assignment.id,
            context=context.scoped_to(tenant_id=assignment.tenant_id, company_id=assignment.company_id),
            old_values={'role': assignment.role, 'is_active': True},
            new_values={'is_active': False},
            notes=f"User with role {assignment.role} removed from company",
        )
        return assignment

    @classmethod
    def get_assignment(cls, user_id, company_id) -> Optional[CompanyUserRole]:
        """The active assignment for (user, company), or None."""
        user_uuid, company_uuid = _parse_uuid(user_id), _parse_uuid(company_id)
        if user_uuid is None or company_uuid is None:
            return None
        return CompanyUserRole.objects.get_assignment(user_uuid, company_uuid)

    @classmethod
    def get_user_company_roles(cls, user_id) -> List[CompanyUserRole]:
        """All active company-level assignments of a user, companies preloaded."""
        user_uuid = _parse_uuid(user_id)
        if user_uuid is None:
            return []
        return list(
            CompanyUserRole.objects.for_user(user_uuid)
            .select_related('company')
            .order_by('company__name')
        )

    @classmethod
    def get_company_users(cls, company_id) -> List[CompanyUserInfo]:
        """All active members of a company with minimal user display data."""
        company_uuid = _parse_uuid(company_id)
        if company_uuid is None:
            return []
        assignments = (
            CompanyUserRole.objects.for_company(company_uuid)
            .select_related('user')
            .order_by('user__email')
        )
        return [
            CompanyUserInfo(
                user_id=assignment.user_id,
                user_name=assignment.user.full_name,
                user_email=assignment.user.email,
                role=assignment.role,
                is_active=assignment.is_active,
            )
            for assignment in assignments
        ]

    @staticmethod
    def _get_user(user_id) -> User:
        user = User.objects.filter(id=_require_uuid(user_id, 'user')).first()
        if user is None:
            raise NotFoundError("user not found")
        return user

    @staticmethod
    def _get_company(company_id) -> Company:
        company = Company.objects.filter(id=_require_uuid(company_id, 'company')).first()
        if company is None:
            raise NotFoundError("company not found")
        return company


class AuthorizationService:
    """
    Answers "can user U do permission P on company C".

    Precedence is strict and short-circuiting: an active OWNER or
    TENANT_ADMIN membership on the company's tenant grants everything and is
    checked before any company-level role, so a stale company role can never
    shadow it. Otherwise the active company-level role is looked up in the
    permission matrix. No role means no access.
    """

    @classmethod
    def resolve_access(cls, user_id, company_id) -> CompanyAccess:
        """
        Resolve the access tier and role of a user on a company.

        Raises:
            NotFoundError: the company cannot be resolved to a tenant
            DataIntegrityError: the store failed
        """
        company_uuid = _require_uuid(company_id, 'company')
        try:
            # 1. company -> tenant
            tenant_id = Company.objects.tenant_id_for(company_uuid)
            if tenant_id is None:
                raise NotFoundError("company not found")

            user_uuid = _parse_uuid(user_id)
            if user_uuid is None:
                return CompanyAccess(company_uuid, tenant_id, tier=0)

            # 2. tenant-wide role on that tenant
            membership = TenantUser.objects.tier_one(user_uuid, tenant_id)
            if membership is not None:
                return CompanyAccess(company_uuid, tenant_id, tier=1, role=membership.role)

            # 3. company-level role on that company
            assignment = CompanyUserRole.objects.get_assignment(user_uuid, company_uuid)
            if assignment is not None:
                return CompanyAccess(company_uuid, tenant_id, tier=2, role=assignment.role)

            return CompanyAccess(company_uuid, tenant_id, tier=0)
        except DatabaseError as e:
            logger.error(
                "Failed to resolve company access",
                extra={'user_id': str(user_id), 'company_id': str(company_id)},
                exc_info=True
            )
            raise DataIntegrityError(
                "failed to check access",
                details={'operation': 'resolve_access'},
            ) from e

    @classmethod
    def check(cls, user_id, company_id, permission) -> bool:
        """Whether the user holds ``permission`` on the company."""
        return permission in cls.resolve_access(user_id, company_id).permissions

    @classmethod
    def list_permissions(cls, user_id, company_id) -> FrozenSet[str]:
        """Every permission the user holds on the company."""
        return cls.resolve_access(user_id, company_id).permissions

    @classmethod
    def has_any_permission(cls, user_id, company_id, permissions: Iterable[str]) -> bool:
        granted = cls.list_permissions(user_id, company_id)
        return any(permission in granted for permission in permissions)

    @classmethod
    def has_all_permissions(cls, user_id, company_id, permissions: Iterable[str]) -> bool:
        granted = cls.list_permissions(user_id, company_id)
        return all(permission in granted for permission in permissions)

    @classmethod
    def is_company_admin(cls, user_id, company_id) -> bool:
        """Tenant-wide access, or the company-level ADMIN role."""
        access = cls.resolve_access(user_id, company_id)
        return access.tier == 1 or (access.tier == 2 and access.role == UserRole.ADMIN)

    @classmethod
    def get_accessible_companies(cls, user_id):
        """Active companies the user can reach through either tier."""
        user_uuid = _parse_uuid(user_id)
        if user_uuid is None:
            return Company.objects.none()

        tenant_ids = TenantUser.objects.filter(
            user_id=user_uuid, is_active=True, role__in=TIER_ONE_ROLES,
        ).values('tenant_id')
        company_ids = CompanyUserRole.objects.for_user(user_uuid).values('company_id')

        return (
            Company.objects.filter(is_active=True)
            .filter(Q(tenant_id__in=tenant_ids) | Q(id__in=company_ids))
            .select_related('tenant')
            .distinct()
        )
