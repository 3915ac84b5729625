"""
Actor context carried from the request into every audit record.
"""
from dataclasses import dataclass, replace
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address


@dataclass(frozen=True)
class AuditContext:
    """Who did something, from where, and as part of which request."""

    tenant_id: Optional[str] = None
    company_id: Optional[str] = None
    actor_user_id: Optional[str] = None
    request_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request, tenant_id=None, company_id=None):
        """
        Build a context from a Django/DRF request.

        Explicit ``tenant_id``/``company_id`` win over ``request.tenant`` and
        ``request.company`` set by upstream middleware.
        """
        user = getattr(request, 'user', None)
        actor_user_id = None
        if user is not None and getattr(user, 'is_authenticated', False):
            actor_user_id = getattr(user, 'id', None)

        if tenant_id is None:
            tenant_id = getattr(getattr(request, 'tenant', None), 'id', None)
        if company_id is None:
            company_id = getattr(getattr(request, 'company', None), 'id', None)

        return cls(
            tenant_id=tenant_id,
            company_id=company_id,
            actor_user_id=actor_user_id,
            request_id=getattr(request, 'request_id', None),
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )

    def scoped_to(self, tenant_id=None, company_id=None):
        """Copy of this context pinned to the tenant/company the action touched."""
        return replace(
            self,
            tenant_id=tenant_id if tenant_id is not None else self.tenant_id,
            company_id=company_id if company_id is not None else self.company_id,
        )


def _valid_ip(value):
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def get_client_ip(request):
    """
    Extract client IP from request.

    The first X-Forwarded-For hop is used when it parses as an address,
    otherwise REMOTE_ADDR. Returns None when neither is a valid IP.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = _valid_ip(x_forwarded_for.split(',')[0].strip())
        if ip:
            return ip
    return _valid_ip(request.META.get('REMOTE_ADDR') or '')
