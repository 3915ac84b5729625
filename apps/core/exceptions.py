"""
Bizhub exception taxonomy and the DRF exception handler that translates it.
"""
import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status

logger = logging.getLogger(__name__)


class BizhubException(Exception):
    """Base exception for Bizhub-specific errors."""

    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BizhubException):
    """Raised when input validation fails (unsupported role, missing ids)."""
    status_code = 400
    code = 'BAD_REQUEST'


class NotFoundError(BizhubException):
    """Raised when a referenced user, company or assignment does not exist."""
    status_code = 404
    code = 'NOT_FOUND'


class PermissionDeniedError(BizhubException):
    """Raised when user lacks required permissions."""
    status_code = 403
    code = 'FORBIDDEN'


class DataIntegrityError(BizhubException):
    """
    Raised when the underlying store fails.

    The message shown to callers is opaque; the original database error is
    chained and logged.
    """
    status_code = 500
    code = 'INTERNAL_ERROR'


class AuditWriteError(BizhubException):
    """Raised when an audit record cannot be written and strict mode is on."""
    status_code = 500
    code = 'AUDIT_WRITE_FAILED'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that logs errors and returns consistent format.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, BizhubException):
        if exc.status_code >= 500:
            logger.error(
                f"API Exception: {exc.__class__.__name__}",
                extra={
                    'exception': str(exc),
                    'details': exc.details,
                    'request_id': request_id,
                    'path': request.path if request else None,
                    'method': request.method if request else None,
                },
                exc_info=True
            )
            message = 'An unexpected error occurred'
        else:
            logger.info(
                f"API Exception: {exc.__class__.__name__}: {exc.message}",
                extra={'request_id': request_id}
            )
            message = exc.message

        return Response(
            {
                'error': message,
                'code': exc.code,
                'request_id': request_id,
            },
            status=exc.status_code
        )

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    logger.error(
        f"API Exception: {exc.__class__.__name__}",
        extra={
            'exception': str(exc),
            'request_id': request_id,
            'path': request.path if request else None,
            'method': request.method if request else None,
        },
        exc_info=True
    )

    # If DRF didn't handle it, return a generic 500 error
    if response is None:
        return Response(
            {
                'error': 'Internal server error',
                'detail': 'An unexpected error occurred',
                'request_id': request_id,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if request_id and isinstance(response.data, dict):
        response.data['request_id'] = request_id

    return response
