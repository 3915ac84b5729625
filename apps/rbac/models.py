"""
RBAC models for dual-tier, multi-tenant access control.

Implements:
- Global User identity (can work across multiple tenants)
- TenantUser: tenant membership carrying the tenant-level role (tier one)
- CompanyUserRole: per-company role assignment (tier two)
"""
from django.db import models
from django.contrib.auth.hashers import make_password, check_password
from apps.core.models import BaseModel, BaseModelManager
from apps.rbac.matrix import UserRole, TIER_ONE_ROLES, is_tier_two


class UserManager(BaseModelManager):
    """
    Manager for User queries.

    Compatible with Django's authentication system and admin interface.
    """

    def active(self):
        """Return only active users."""
        return self.filter(is_active=True)

    def by_email(self, email):
        """Find user by email."""
        return self.filter(email=self.normalize_email(email)).first()

    def create_user(self, email, password=None, **extra_fields):
        """Create a new user with hashed password."""
        if not email:
            raise ValueError('Email address is required')

        email = self.normalize_email(email)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_superuser', False)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create a superuser with admin access.

        Required for Django's createsuperuser command.
        """
        extra_fields['is_superuser'] = True
        extra_fields.setdefault('is_active', True)
        return self.create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_email(email):
        """Lowercase the domain part of the email address."""
        email = (email or '').strip()
        try:
            email_name, domain_part = email.rsplit('@', 1)
        except ValueError:
            return email
        return email_name + '@' + domain_part.lower()

    def get_by_natural_key(self, email):
        return self.get(**{self.model.USERNAME_FIELD: email})


class User(BaseModel):
    """
    Global user identity - can belong to multiple tenants.

    Authentication happens at the User level, authorization at the
    TenantUser (tenant-wide) and CompanyUserRole (per-company) level.

    This is the AUTH_USER_MODEL for the entire application, including Django admin.
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text="User email address (unique globally)"
    )
    password_hash = models.CharField(
        max_length=255,
        help_text="Hashed password",
        db_column='password_hash'
    )
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether user account is active"
    )
    is_superuser = models.BooleanField(
        default=False,
        help_text="Platform administrator (Django admin access only)"
    )
    last_login = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    @property
    def password(self):
        """Alias for password_hash; Django admin expects a 'password' attribute."""
        return self.password_hash

    @password.setter
    def password(self, value):
        self.password_hash = value

    def check_password(self, raw_password):
        return check_password(raw_password, self.password_hash)

    def set_password(self, raw_password):
        """Hash and store ``raw_password``; None stores an unusable password."""
        self.password_hash = make_password(raw_password)

    def has_usable_password(self):
        return not (self.password_hash or '').startswith('!')

    @property
    def full_name(self):
        """Full name, or the email if no name is set."""
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def get_full_name(self):
        return self.full_name

    def get_short_name(self):
        return self.first_name or self.email

    def get_username(self):
        return self.email

    def natural_key(self):
        return (self.email,)

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    @property
    def is_staff(self):
        """Django admin access is limited to superusers."""
        return self.is_superuser

    def has_perm(self, perm, obj=None):
        # Business permissions go through AuthorizationService, not Django perms
        return self.is_active and self.is_superuser

    def has_perms(self, perm_list, obj=None):
        return all(self.has_perm(perm, obj) for perm in perm_list)

    def has_module_perms(self, app_label):
        return self.is_active and self.is_superuser


class TenantUserManager(BaseModelManager):
    """Manager for TenantUser queries."""

    def for_tenant(self, tenant):
        """Active memberships of a tenant."""
        return self.filter(tenant=tenant, is_active=True)

    def for_user(self, user):
        """Active memberships of a user across tenants."""
        return self.filter(user=user, is_active=True)

    def tier_one(self, user_id, tenant_id):
        """The active OWNER/TENANT_ADMIN membership for (user, tenant), or None."""
        return self.filter(
            user_id=user_id,
            tenant_id=tenant_id,
            is_active=True,
            role__in=TIER_ONE_ROLES,
        ).first()


class TenantUser(BaseModel):
    """
    Association between User and Tenant carrying a tenant-level role.

    Only an active membership with role OWNER or TENANT_ADMIN grants
    tenant-wide (tier one) access. Memberships are created through the Django
    admin.
    """

    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='tenant_users',
        db_index=True,
        help_text="Tenant this membership belongs to"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='tenant_memberships',
        db_index=True,
        help_text="User who is a member"
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.STAFF,
        db_index=True,
        help_text="Tenant-level role; OWNER and TENANT_ADMIN reach every company"
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether membership is active"
    )

    objects = TenantUserManager()

    class Meta:
        db_table = 'tenant_users'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'user'],
                name='uniq_tenant_user',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'tenant', 'is_active', 'role'], name='tenant_user_lookup_idx'),
        ]

    def __str__(self):
        return f"{self.user.email} @ {self.tenant.name} ({self.role})"

    @property
    def is_tier_one(self):
        return self.is_active and self.role in TIER_ONE_ROLES


class CompanyUserRoleManager(BaseModelManager):
    """Manager for CompanyUserRole queries."""

    def active(self):
        return self.filter(is_active=True)

    def for_user(self, user_id):
        """Active assignments of a user across companies."""
        return self.filter(user_id=user_id, is_active=True)

    def for_company(self, company_id):
        """Active assignments within a company."""
        return self.filter(company_id=company_id, is_active=True)

    def get_assignment(self, user_id, company_id):
        """The active assignment for (user, company), or None."""
        return self.filter(user_id=user_id, company_id=company_id, is_active=True).first()


class CompanyUserRole(BaseModel):
    """
    Per-company role assignment (tier two).

    At most one row exists per (user, company); re-assigning updates the row
    and removing a user deactivates it, so the history of who could access a
    company is never lost. ``tenant`` is denormalized from ``company``.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='company_roles',
        help_text="User holding the role"
    )
    company = models.ForeignKey(
        'tenants.Company',
        on_delete=models.CASCADE,
        related_name='user_roles',
        help_text="Company the role applies to"
    )
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='company_user_roles',
        help_text="Tenant of the company (denormalized)"
    )
    role = models.CharField(
        max_length=20,
        choices=[(role.value, role.label) for role in UserRole if is_tier_two(role)],
        db_index=True,
        help_text="Company-level role"
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="False once the user has been removed from the company"
    )

    objects = CompanyUserRoleManager()

    class Meta:
        db_table = 'company_user_roles'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'company'],
                name='uniq_company_user_role',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'company', 'is_active'], name='cur_user_company_active_idx'),
            models.Index(fields=['company', 'is_active'], name='cur_company_active_idx'),
            models.Index(fields=['tenant', 'user'], name='cur_tenant_user_idx'),
        ]

    def __str__(self):
        return f"{self.user.email} -> {self.company.name} ({self.role})"

    def save(self, *args, **kwargs):
        """Refuse tenant-level roles and keep ``tenant`` in sync with ``company``."""
        if not is_tier_two(self.role):
            raise ValueError(f"'{self.role}' is not a company-level role")
        self.tenant_id = self.company.tenant_id
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'tenant' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['tenant']
        super().save(*args, **kwargs)
