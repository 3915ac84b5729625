"""
Audit trail service.

One generic entry point records every privileged mutation, whatever the
entity type. Field diffing and create-field filtering live here and nowhere
else, so every business service produces the same shape of record.

Writing an audit record is best-effort: a failed write is logged and
swallowed so it never turns a successful business operation into a failure.
Set ``AUDIT_STRICT_MODE = True`` to raise ``AuditWriteError`` instead.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional
from django.conf import settings
from django.db import transaction

from apps.audit.context import AuditContext
from apps.audit.models import AuditLog
from apps.core.exceptions import AuditWriteError, ValidationError
from apps.core.logging import SecurityLogger

logger = logging.getLogger(__name__)

# String values that mean "left at default" on a create form
DEFAULT_LOOKING_STRINGS = frozenset({'', '0', '0.00'})


def changed_fields(old_values: Optional[Dict[str, Any]], new_values: Optional[Dict[str, Any]]) -> List[str]:
    """
    Keys of ``new_values`` whose value differs from ``old_values``.

    A key present only in ``new_values`` counts as changed. Keys present only
    in ``old_values`` are ignored.
    """
    old_values = old_values or {}
    missing = object()
    return sorted(
        key for key, value in (new_values or {}).items()
        if old_values.get(key, missing) != value
    )


def is_default_value(value) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, str):
        return value in DEFAULT_LOOKING_STRINGS
    return False


def supplied_fields(values: Optional[Dict[str, Any]]) -> List[str]:
    """
    Keys of a create payload that hold a user-supplied value.

    Empty strings, "0", "0.00", False and None are treated as defaults.
    Numbers and other non-string values always count as supplied.
    """
    return sorted(key for key, value in (values or {}).items() if not is_default_value(value))


def describe_changes(old_values, new_values) -> str:
    """Human-readable note for a record that carries value maps."""
    if old_values is not None and new_values is not None:
        fields = changed_fields(old_values, new_values)
        return f"Changed fields: [{', '.join(fields)}]" if fields else ''
    if new_values is not None:
        fields = supplied_fields(new_values)
        return f"Created fields: [{', '.join(fields)}]" if fields else ''
    return ''


class AuditService:
    """
    Service for writing and reading the audit trail.
    """

    @classmethod
    def record(cls, action: str, entity_type: str, entity_id,
               context: Optional[AuditContext] = None,
               old_values: Optional[Dict[str, Any]] = None,
               new_values: Optional[Dict[str, Any]] = None,
               status: str = AuditLog.STATUS_SUCCESS,
               notes: Optional[str] = None) -> Optional[AuditLog]:
        """
        Persist one immutable audit record.

        Args:
            action: Action performed (e.g., 'WAREHOUSE_UPDATED')
            entity_type: Entity type tag (e.g., 'WAREHOUSE')
            entity_id: ID of the affected entity
            context: Actor context (tenant, company, actor, request, ip, user agent)
            old_values: State before the change (updates and deletes)
            new_values: State after the change (creates and updates)
            status: SUCCESS, FAILED or PARTIAL
            notes: Free text; synthesized from the value maps when omitted

        Returns:
            AuditLog instance, or None if the write failed (non-strict mode)
        """
        context = context or AuditContext()
        if notes is None:
            notes = describe_changes(old_values, new_values)

        try:
            # Own savepoint: a failed insert must not poison the caller's transaction
            with transaction.atomic():
                return AuditLog.objects.create(
                    tenant_id=context.tenant_id,
                    company_id=context.company_id,
                    actor_user_id=context.actor_user_id,
                    request_id=context.request_id or '',
                    action=action,
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    old_values=old_values,
                    new_values=new_values,
                    status=status,
                    ip_address=context.ip_address or None,
                    user_agent=context.user_agent or '',
                    notes=notes,
                )
        except Exception as e:
            logger.warning(
                f"Failed to write audit record: {e}",
                extra={
                    'action': action,
                    'entity_type': entity_type,
                    'entity_id': str(entity_id),
                    'tenant_id': str(context.tenant_id) if context.tenant_id else None,
                    'request_id': context.request_id,
                },
                exc_info=True
            )
            SecurityLogger.log_event(
                'audit_write_failed',
                level='error',
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id),
            )
            if getattr(settings, 'AUDIT_STRICT_MODE', False):
                raise AuditWriteError(
                    "Audit record could not be written",
                    details={'action': action, 'entity_type': entity_type},
                ) from e
            return None

    @classmethod
    def record_failure(cls, action: str, entity_type: str, entity_id, error,
                       context: Optional[AuditContext] = None) -> Optional[AuditLog]:
        """
        Record a denied or failed privileged attempt.

        No value payloads are stored; the error text goes into ``notes``.
        """
        return cls.record(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            context=context,
            status=AuditLog.STATUS_FAILED,
            notes=f"Operation failed: {error}",
        )

    @classmethod
    def query(cls, tenant_id, action=None, entity_type=None, entity_id=None,
              actor_user_id=None, company_id=None, request_id=None, status=None):
        """
        Tenant-scoped audit records, newest first.

        ``tenant_id`` is mandatory: the trail is never read across tenants.
        """
        if not tenant_id:
            raise ValidationError("tenant_id is required to read the audit trail")

        qs = AuditLog.objects.for_tenant(tenant_id)
        filters = {
            'action': action,
            'entity_type': entity_type,
            'entity_id': str(entity_id) if entity_id is not None else None,
            'actor_user_id': actor_user_id,
            'company_id': company_id,
            'request_id': request_id,
            'status': status,
        }
        qs = qs.filter(**{field: value for field, value in filters.items() if value is not None})
        return qs.order_by('-created_at')

    @classmethod
    def entity_history(cls, tenant_id, entity_type: str, entity_id) -> Iterable[AuditLog]:
        """Chronological (oldest first) history of one entity within a tenant."""
        return cls.query(tenant_id, entity_type=entity_type, entity_id=entity_id).order_by('created_at')
