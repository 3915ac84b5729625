"""
DRF permission class and decorator for company-scoped authorization.

This module provides:
- HasCompanyPermission: DRF permission class backed by AuthorizationService
- @requires_permissions: Decorator to declare required permissions on views
"""
import logging
from rest_framework.exceptions import NotFound
from rest_framework.permissions import BasePermission

from apps.audit.context import AuditContext
from apps.audit.services import AuditService
from apps.core.exceptions import NotFoundError
from apps.core.logging import SecurityLogger

logger = logging.getLogger(__name__)

COMPANY_HEADER = 'HTTP_X_COMPANY_ID'


def get_company_id(request, view):
    """Company id from the view kwargs, falling back to the X-Company-ID header."""
    kwargs = getattr(view, 'kwargs', None) or {}
    return kwargs.get('company_id') or request.META.get(COMPANY_HEADER)


class HasCompanyPermission(BasePermission):
    """
    Enforce company-scoped permissions on API endpoints.

    The view declares ``required_permissions`` (a single Permission or an
    iterable). Every listed permission must be held on the company named by
    the ``company_id`` URL kwarg or the ``X-Company-ID`` header.

    Unknown companies raise 404. Denials return False (403), are logged as
    security events and recorded in the audit trail with status FAILED.

    Usage in views:
        class WarehouseListView(APIView):
            permission_classes = [HasCompanyPermission]
            required_permissions = [Permission.VIEW_DATA]
    """

    def has_permission(self, request, view):
        from apps.rbac.services import AuthorizationService

        required = getattr(view, 'required_permissions', None)
        if not required:
            return True
        if isinstance(required, str):
            required = {required}
        else:
            required = set(required)

        user = getattr(request, 'user', None)
        if user is None or not getattr(user, 'is_authenticated', False):
            return False

        company_id = get_company_id(request, view)
        if not company_id:
            logger.warning(
                "Permission check without company context",
                extra={
                    'view': view.__class__.__name__,
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            return False

        try:
            access = AuthorizationService.resolve_access(user.id, company_id)
        except NotFoundError as e:
            raise NotFound(e.message)

        missing = {permission for permission in required if permission not in access.permissions}
        if not missing:
            request.company_access = access
            return True

        context = AuditContext.from_request(
            request, tenant_id=access.tenant_id, company_id=access.company_id,
        )
        SecurityLogger.log_permission_denied(
            user_id=user.id,
            company_id=company_id,
            required_permissions=missing,
            tenant_id=access.tenant_id,
            ip_address=context.ip_address,
        )
        AuditService.record_failure(
            'PERMISSION_DENIED',
            'COMPANY',
            company_id,
            f"missing permissions: {', '.join(sorted(str(p) for p in missing))}",
            context=context,
        )
        return False


def requires_permissions(*permissions):
    """
    Decorator to declare required permissions on a view class.

    Usage:
        @requires_permissions(Permission.VIEW_DATA, Permission.EDIT_DATA)
        class SalesOrderView(APIView):
            permission_classes = [HasCompanyPermission]
    """
    def decorator(view_class):
        view_class.required_permissions = set(permissions)
        return view_class
    return decorator
