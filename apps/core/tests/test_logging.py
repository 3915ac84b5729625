"""
Tests for structured logging, PII masking and security events.
"""
import json
import logging
import sys
from unittest.mock import patch

from django.test import TestCase
from apps.core.logging import PIIMasker, JSONFormatter, SecurityLogger


class PIIMaskerTestCase(TestCase):
    """Test PII masking functionality."""

    def test_mask_email_addresses(self):
        text = "Contact user@example.com or admin@test.org"
        masked = PIIMasker.mask_email(text)

        self.assertIn("u***@example.com", masked)
        self.assertNotIn("user@example.com", masked)
        self.assertIn("a****@test.org", masked)

    def test_mask_api_keys(self):
        text = 'api_key: "sk_live_abc123" and token="bearer_xyz789"'
        masked = PIIMasker.mask_api_keys(text)

        self.assertIn("api_key: ********", masked)
        self.assertNotIn("sk_live_abc123", masked)
        self.assertIn("token: ********", masked)
        self.assertNotIn("bearer_xyz789", masked)

    def test_mask_dict_sensitive_fields(self):
        data = {
            'company_name': 'Acme',
            'password_hash': 'pbkdf2_sha256$abc',
            'npwp': '01.234.567.8-901.000',
            'contact': {'email': 'john@example.com'},
            'amount': 99.99,
        }
        masked = PIIMasker.mask_dict(data)

        self.assertEqual(masked['company_name'], 'Acme')
        self.assertEqual(masked['password_hash'], '********')
        self.assertEqual(masked['npwp'], '********')
        self.assertEqual(masked['contact']['email'], 'j***@example.com')
        self.assertEqual(masked['amount'], 99.99)

    def test_non_strings_pass_through(self):
        self.assertIsNone(PIIMasker.mask_text(None))
        self.assertEqual(PIIMasker.mask_email(42), 42)


class JSONFormatterTestCase(TestCase):
    """Test JSON log formatting."""

    def make_record(self, msg, exc_info=None, **extra):
        record = logging.LogRecord(
            name='apps.rbac.services', level=logging.INFO, pathname=__file__, lineno=10,
            msg=msg, args=(), exc_info=exc_info,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        output = json.loads(JSONFormatter().format(self.make_record('Company role assigned')))

        self.assertEqual(output['level'], 'INFO')
        self.assertEqual(output['logger'], 'apps.rbac.services')
        self.assertEqual(output['message'], 'Company role assigned')
        self.assertIn('timestamp', output)

    def test_extra_context_included_and_masked(self):
        record = self.make_record(
            'Assigned owner@example.com',
            request_id='req-1',
            tenant_id='t-1',
            company_id='c-1',
            details={'api_key': 'sk_live_abc'},
        )
        output = json.loads(JSONFormatter().format(record))

        self.assertEqual(output['request_id'], 'req-1')
        self.assertEqual(output['tenant_id'], 't-1')
        self.assertEqual(output['company_id'], 'c-1')
        self.assertEqual(output['details']['api_key'], '********')
        self.assertNotIn('owner@example.com', output['message'])

    def test_exception_info(self):
        try:
            raise ValueError("lookup failed for admin@example.com")
        except ValueError:
            record = self.make_record('Failure', exc_info=sys.exc_info())

        output = json.loads(JSONFormatter().format(record))

        self.assertEqual(output['exception']['type'], 'ValueError')
        self.assertNotIn('admin@example.com', output['exception']['message'])

    def test_unserializable_extra_is_stringified(self):
        record = self.make_record('msg', actor=object())
        output = json.loads(JSONFormatter().format(record))

        self.assertIn('object', output['actor'])


class SecurityLoggerTestCase(TestCase):
    """Test security event logging."""

    @patch('apps.core.logging.sentry_sdk')
    def test_permission_denied_logged(self, mock_sentry):
        with self.assertLogs('security', level='WARNING') as logs:
            SecurityLogger.log_permission_denied(
                user_id='u-1', company_id='c-1',
                required_permissions={'DELETE_DATA', 'EDIT_DATA'},
                tenant_id='t-1', ip_address='10.0.0.1',
            )

        record = logs.records[0]
        self.assertEqual(record.event_type, 'permission_denied')
        self.assertEqual(record.required_permissions, ['DELETE_DATA', 'EDIT_DATA'])
        self.assertEqual(record.company_id, 'c-1')
        mock_sentry.capture_message.assert_not_called()

    @patch('apps.core.logging.sentry_sdk')
    def test_critical_events_go_to_sentry(self, mock_sentry):
        with self.assertLogs('security', level='ERROR'):
            SecurityLogger.log_event('audit_write_failed', level='error', action='X')

        mock_sentry.capture_message.assert_called_once()

    def test_only_emitted_events_are_critical(self):
        self.assertEqual(SecurityLogger.CRITICAL_EVENTS, {'audit_write_failed'})
