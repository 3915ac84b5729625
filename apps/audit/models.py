"""
Append-only audit trail for RBAC changes and privileged business mutations.
"""
import uuid
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditLogImmutableError(Exception):
    """Raised on any attempt to change or remove an audit record."""


class AuditLogQuerySet(models.QuerySet):
    """QuerySet that refuses bulk mutation of audit records."""

    def update(self, **kwargs):
        raise AuditLogImmutableError("Audit records cannot be updated")

    def delete(self):
        raise AuditLogImmutableError("Audit records cannot be deleted")

    def for_tenant(self, tenant_id):
        return self.filter(tenant_id=tenant_id)

    def for_entity(self, entity_type, entity_id):
        return self.filter(entity_type=entity_type, entity_id=str(entity_id))

    def by_request(self, request_id):
        """All audit records written while handling one request."""
        return self.filter(request_id=request_id)


class AuditLog(models.Model):
    """
    Immutable audit record.

    Context ids are plain columns rather than foreign keys: removing a
    tenant, company or user must never cascade into or rewrite the trail.
    """

    STATUS_SUCCESS = 'SUCCESS'
    STATUS_FAILED = 'FAILED'
    STATUS_PARTIAL = 'PARTIAL'
    STATUS_CHOICES = [
        (STATUS_SUCCESS, 'Success'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_PARTIAL, 'Partial'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Actor context
    tenant_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Tenant this action belongs to (null for platform-level)"
    )
    company_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Company the action was scoped to"
    )
    actor_user_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="User who performed the action (null for system actions)"
    )
    request_id = models.CharField(
        max_length=100,
        blank=True,
        default='',
        db_index=True,
        help_text="Correlates entries written by one logical operation"
    )

    # Action details
    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Action performed (e.g., 'USER_COMPANY_ROLE_ASSIGNED')"
    )
    entity_type = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Type of target entity (e.g., 'USER_COMPANY_ROLE', 'WAREHOUSE')"
    )
    entity_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="ID of target entity"
    )

    # Change tracking
    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_SUCCESS,
        db_index=True,
    )

    # Request context
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant_id', 'created_at'], name='audit_tenant_created_idx'),
            models.Index(fields=['tenant_id', 'action', 'created_at'], name='audit_tenant_action_idx'),
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['company_id', 'created_at'], name='audit_company_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id} [{self.status}]"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutableError("Audit records cannot be updated")
        kwargs['force_insert'] = True
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        raise AuditLogImmutableError("Audit records cannot be deleted")
