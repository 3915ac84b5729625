"""
Tenant and company models for multi-tenant isolation.

A Tenant is the top-level isolation boundary. Each Tenant owns one or more
Companies, which scope most business data and all company-level role
assignments.
"""
from django.db import models
from apps.core.models import BaseModel, BaseModelManager


class TenantManager(BaseModelManager):
    """Manager for tenant queries."""

    def active(self):
        """Return only active tenants."""
        return self.filter(status='active')

    def by_slug(self, slug):
        return self.filter(slug=slug).first()


class Tenant(BaseModel):
    """
    Tenant model representing an isolated business account.

    Tenant-wide roles (OWNER, TENANT_ADMIN) are granted through
    ``apps.rbac.models.TenantUser`` and reach every company of the tenant.
    """

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('suspended', 'Suspended'),
    ]

    name = models.CharField(
        max_length=255,
        help_text="Tenant display name"
    )
    slug = models.SlugField(
        max_length=100,
        unique=True,
        help_text="URL-safe unique identifier"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='active',
        db_index=True,
        help_text="Account status"
    )

    objects = TenantManager()

    class Meta:
        db_table = 'tenants'
        ordering = ['name']

    def __str__(self):
        return self.name


class CompanyManager(BaseModelManager):
    """Manager for company queries with tenant scoping."""

    def for_tenant(self, tenant):
        """Get all active companies for a specific tenant."""
        return self.filter(tenant=tenant, is_active=True)

    def tenant_id_for(self, company_id):
        """Resolve a company id to its tenant id, or None if unknown."""
        return self.filter(id=company_id).values_list('tenant_id', flat=True).first()


class Company(BaseModel):
    """
    Business unit scoped within a Tenant.

    Warehouses, sales orders, goods receipts and payments all belong to a
    company, and company-level roles (ADMIN, FINANCE, SALES, WAREHOUSE,
    STAFF) are granted per company.
    """

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name='companies',
        db_index=True,
        help_text="Tenant this company belongs to"
    )
    name = models.CharField(
        max_length=255,
        help_text="Company display name"
    )
    legal_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Registered legal name"
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether the company is operating"
    )

    objects = CompanyManager()

    class Meta:
        db_table = 'companies'
        ordering = ['tenant', 'name']
        verbose_name_plural = 'companies'
        indexes = [
            models.Index(fields=['tenant', 'is_active'], name='company_tenant_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.tenant.name})"
