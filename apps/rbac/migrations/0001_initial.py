import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when the record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, help_text='Timestamp when the record was last updated')),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, help_text='Timestamp when the record was soft deleted', null=True)),
                ('email', models.EmailField(db_index=True, help_text='User email address (unique globally)', max_length=254, unique=True)),
                ('password_hash', models.CharField(db_column='password_hash', help_text='Hashed password', max_length=255)),
                ('first_name', models.CharField(blank=True, max_length=100)),
                ('last_name', models.CharField(blank=True, max_length=100)),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Whether user account is active')),
                ('is_superuser', models.BooleanField(default=False, help_text='Platform administrator (Django admin access only)')),
                ('last_login', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'db_table': 'users',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='TenantUser',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when the record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, help_text='Timestamp when the record was last updated')),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, help_text='Timestamp when the record was soft deleted', null=True)),
                ('role', models.CharField(choices=[('OWNER', 'Owner'), ('TENANT_ADMIN', 'Tenant Admin'), ('ADMIN', 'Admin'), ('FINANCE', 'Finance'), ('SALES', 'Sales'), ('WAREHOUSE', 'Warehouse'), ('STAFF', 'Staff')], db_index=True, default='STAFF', help_text='Tenant-level role; OWNER and TENANT_ADMIN reach every company', max_length=20)),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Whether membership is active')),
                ('tenant', models.ForeignKey(help_text='Tenant this membership belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='tenant_users', to='tenants.tenant')),
                ('user', models.ForeignKey(help_text='User who is a member', on_delete=django.db.models.deletion.CASCADE, related_name='tenant_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'tenant_users',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['user', 'tenant', 'is_active', 'role'], name='tenant_user_lookup_idx')],
                'constraints': [models.UniqueConstraint(fields=('tenant', 'user'), name='uniq_tenant_user')],
            },
        ),
        migrations.CreateModel(
            name='CompanyUserRole',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when the record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, help_text='Timestamp when the record was last updated')),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, help_text='Timestamp when the record was soft deleted', null=True)),
                ('role', models.CharField(choices=[('ADMIN', 'Admin'), ('FINANCE', 'Finance'), ('SALES', 'Sales'), ('WAREHOUSE', 'Warehouse'), ('STAFF', 'Staff')], db_index=True, help_text='Company-level role', max_length=20)),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='False once the user has been removed from the company')),
                ('company', models.ForeignKey(help_text='Company the role applies to', on_delete=django.db.models.deletion.CASCADE, related_name='user_roles', to='tenants.company')),
                ('tenant', models.ForeignKey(help_text='Tenant of the company (denormalized)', on_delete=django.db.models.deletion.CASCADE, related_name='company_user_roles', to='tenants.tenant')),
                ('user', models.ForeignKey(help_text='User holding the role', on_delete=django.db.models.deletion.CASCADE, related_name='company_roles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'company_user_roles',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'company', 'is_active'], name='cur_user_company_active_idx'),
                    models.Index(fields=['company', 'is_active'], name='cur_company_active_idx'),
                    models.Index(fields=['tenant', 'user'], name='cur_tenant_user_idx'),
                ],
                'constraints': [models.UniqueConstraint(fields=('user', 'company'), name='uniq_company_user_role')],
            },
        ),
    ]
