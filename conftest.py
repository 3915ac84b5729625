"""
Pytest configuration and fixtures.
"""
import pytest
from django.conf import settings
import django


def pytest_configure(config):
    """Configure Django settings for tests."""
    settings.DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'ATOMIC_REQUESTS': False,
    }
    django.setup()


@pytest.fixture
def api_factory():
    """Return DRF request factory."""
    from rest_framework.test import APIRequestFactory
    return APIRequestFactory()


@pytest.fixture
def tenant(db):
    """Create a test tenant."""
    from apps.tenants.models import Tenant
    return Tenant.objects.create(
        name='Test Tenant',
        slug='test-tenant',
        status='active'
    )


@pytest.fixture
def other_tenant(db):
    """Create another test tenant for isolation tests."""
    from apps.tenants.models import Tenant
    return Tenant.objects.create(
        name='Other Tenant',
        slug='other-tenant',
        status='active'
    )


@pytest.fixture
def company(db, tenant):
    """Create a company under the test tenant."""
    from apps.tenants.models import Company
    return Company.objects.create(
        tenant=tenant,
        name='Acme Trading',
        legal_name='Acme Trading Ltd'
    )


@pytest.fixture
def second_company(db, tenant):
    """Create a second company under the same tenant."""
    from apps.tenants.models import Company
    return Company.objects.create(tenant=tenant, name='Acme Logistics')


@pytest.fixture
def other_company(db, other_tenant):
    """Create a company under the other tenant."""
    from apps.tenants.models import Company
    return Company.objects.create(tenant=other_tenant, name='Globex')


@pytest.fixture
def user(db):
    """Create a test user."""
    from apps.rbac.models import User
    return User.objects.create_user(
        email='test@example.com',
        password='testpass123',
        first_name='Test',
        last_name='User'
    )


@pytest.fixture
def other_user(db):
    """Create a second test user."""
    from apps.rbac.models import User
    return User.objects.create_user(
        email='other@example.com',
        password='testpass123'
    )


@pytest.fixture
def owner(db, tenant):
    """Create a user with the OWNER role on the test tenant."""
    from apps.rbac.models import User, TenantUser
    from apps.rbac.matrix import UserRole
    owner = User.objects.create_user(email='owner@example.com', password='testpass123')
    TenantUser.objects.create(tenant=tenant, user=owner, role=UserRole.OWNER)
    return owner
