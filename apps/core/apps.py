from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
import logging

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    WEAK_SECRET_PATTERNS = (
        'your-secret-key',
        'change-me',
        'insecure',
        'django-insecure',
        '12345',
        'not-for-production',
    )

    def ready(self):
        """
        Validate security-critical settings when Django initializes.
        """
        self._validate_security_settings()

    def _validate_security_settings(self):
        debug = getattr(settings, 'DEBUG', False)
        secret_key = getattr(settings, 'SECRET_KEY', None)

        if not secret_key:
            raise ImproperlyConfigured(
                "SECRET_KEY must be set in environment variables. "
                "Generate with: "
                "python -c \"import secrets; print(secrets.token_urlsafe(50))\""
            )

        if getattr(settings, 'AUDIT_STRICT_MODE', False):
            logger.info("Audit strict mode enabled: audit write failures will abort operations")
        else:
            logger.info("Audit best-effort mode: audit write failures are logged and swallowed")

        if debug:
            return

        secret_lower = secret_key.lower()
        for pattern in self.WEAK_SECRET_PATTERNS:
            if pattern in secret_lower:
                raise ImproperlyConfigured(
                    f"SECRET_KEY appears to be a default or weak value (contains '{pattern}'). "
                    f"Generate a strong key with: "
                    f"python -c \"import secrets; print(secrets.token_urlsafe(50))\""
                )
