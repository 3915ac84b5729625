"""
Tests for startup validation of security-critical settings.
"""
import runpy
from unittest.mock import patch

import environ
import pytest
from django.apps import apps
from django.conf import settings as django_settings
from django.core.exceptions import ImproperlyConfigured


@pytest.fixture
def core_config():
    return apps.get_app_config('core')


class TestSecretKeyValidation:

    def test_missing_secret_key_rejected(self, core_config, settings):
        settings.SECRET_KEY = ''

        with pytest.raises(ImproperlyConfigured, match='SECRET_KEY'):
            core_config._validate_security_settings()

    @pytest.mark.parametrize('key', [
        'django-insecure-abcdefghijklmnopqrstuvwxyz',
        'change-me-before-deploying-this-service',
        'your-secret-key-here',
        'bizhub-local-development-key-not-for-production-use',
    ])
    def test_weak_secret_key_rejected_in_production(self, core_config, settings, key):
        settings.DEBUG = False
        settings.SECRET_KEY = key

        with pytest.raises(ImproperlyConfigured, match='weak value'):
            core_config._validate_security_settings()

    def test_weak_secret_key_allowed_in_debug(self, core_config, settings):
        settings.DEBUG = True
        settings.SECRET_KEY = 'django-insecure-local'

        core_config._validate_security_settings()

    def test_strong_key_accepted(self, core_config, settings):
        settings.DEBUG = False
        settings.SECRET_KEY = 'k3Jx9vQw7LmN2pR5tY8uB1cF4hG6jD0sA_zXeW-qTnM'

        core_config._validate_security_settings()


class TestSecretKeyRequired:

    def test_settings_module_has_no_fallback_key(self, monkeypatch):
        monkeypatch.delenv('SECRET_KEY', raising=False)
        monkeypatch.setattr(environ.Env, 'read_env', lambda *args, **kwargs: None)

        with pytest.raises(ImproperlyConfigured, match='SECRET_KEY'):
            runpy.run_path(str(django_settings.BASE_DIR / 'config' / 'settings.py'))


class TestAuditModeLog:

    @pytest.mark.parametrize('debug', [True, False])
    def test_best_effort_mode_logged(self, core_config, settings, debug):
        settings.DEBUG = debug
        settings.AUDIT_STRICT_MODE = False
        settings.SECRET_KEY = 'k3Jx9vQw7LmN2pR5tY8uB1cF4hG6jD0sA_zXeW-qTnM'

        with patch('apps.core.apps.logger') as mock_logger:
            core_config._validate_security_settings()

        mock_logger.info.assert_called_once()
        assert 'best-effort' in mock_logger.info.call_args.args[0]

    def test_strict_mode_logged_in_debug(self, core_config, settings):
        settings.DEBUG = True
        settings.AUDIT_STRICT_MODE = True

        with patch('apps.core.apps.logger') as mock_logger:
            core_config._validate_security_settings()

        assert 'strict mode' in mock_logger.info.call_args.args[0]
