"""
RBAC (Role-Based Access Control) application.

Provides dual-tier, multi-tenant access control with:
- Global user identity system
- Tenant-wide roles (OWNER, TENANT_ADMIN) reaching every company of a tenant
- Company-level roles (ADMIN, FINANCE, SALES, WAREHOUSE, STAFF)
- A fixed role-to-permission matrix
- Audited role assignment and removal
"""
