import uuid

import django.core.serializers.json
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tenant_id', models.UUIDField(blank=True, db_index=True, help_text='Tenant this action belongs to (null for platform-level)', null=True)),
                ('company_id', models.UUIDField(blank=True, db_index=True, help_text='Company the action was scoped to', null=True)),
                ('actor_user_id', models.UUIDField(blank=True, db_index=True, help_text='User who performed the action (null for system actions)', null=True)),
                ('request_id', models.CharField(blank=True, db_index=True, default='', help_text='Correlates entries written by one logical operation', max_length=100)),
                ('action', models.CharField(db_index=True, help_text="Action performed (e.g., 'USER_COMPANY_ROLE_ASSIGNED')", max_length=100)),
                ('entity_type', models.CharField(db_index=True, help_text="Type of target entity (e.g., 'USER_COMPANY_ROLE', 'WAREHOUSE')", max_length=50)),
                ('entity_id', models.CharField(db_index=True, help_text='ID of target entity', max_length=255)),
                ('old_values', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('new_values', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('status', models.CharField(choices=[('SUCCESS', 'Success'), ('FAILED', 'Failed'), ('PARTIAL', 'Partial')], db_index=True, default='SUCCESS', max_length=10)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, default='')),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['tenant_id', 'created_at'], name='audit_tenant_created_idx'),
                    models.Index(fields=['tenant_id', 'action', 'created_at'], name='audit_tenant_action_idx'),
                    models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
                    models.Index(fields=['company_id', 'created_at'], name='audit_company_created_idx'),
                ],
            },
        ),
    ]
