"""
Custom Exception Handling for the Referral Backend

Business errors are raised by services and rendered by the DRF exception
handler in one consistent format.
"""
import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error format.

    Error Response Format:
    {
        "error": "ErrorType",
        "message": "Human-readable error message",
        "status_code": 400,
        "details": {...}  // Optional, additional context
    }
    """
    if isinstance(exc, APIException):
        error_data = {
            'error': exc.__class__.__name__,
            'message': exc.message,
            'status_code': exc.status_code,
        }
        if exc.details:
            error_data['details'] = exc.details
        if exc.retryable:
            error_data['retryable'] = True
        return Response(error_data, status=exc.status_code)

    # rest_framework.views resolves DEFAULT_PERMISSION_CLASSES on import, which
    # loads apps.core.permissions and therefore this module
    from rest_framework.views import exception_handler

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        # Standardize the response format
        error_data = {
            'error': exc.__class__.__name__,
            'message': str(exc.detail) if hasattr(exc, 'detail') else str(exc),
        }

        # Add status code to error data
        if hasattr(exc, 'status_code'):
            error_data['status_code'] = exc.status_code

        # Handle DRF validation errors specially
        if hasattr(exc, 'detail'):
            if isinstance(exc.detail, dict):
                error_data['details'] = exc.detail
                # Create a summary message from field errors
                messages = []
                for field, errors in exc.detail.items():
                    if isinstance(errors, list):
                        messages.append(f"{field}: {', '.join(str(e) for e in errors)}")
                    else:
                        messages.append(f"{field}: {errors}")
                error_data['message'] = '; '.join(messages)
            elif isinstance(exc.detail, list):
                error_data['message'] = ', '.join(str(e) for e in exc.detail)

        response.data = error_data

    else:
        # Handle unexpected exceptions
        logger.exception(f'Unhandled exception: {exc}')

        error_data = {
            'error': 'InternalServerError',
            'message': 'An unexpected error occurred',
        }

        response = Response(
            error_data,
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response


class APIException(Exception):
    """
    Base exception class for API errors.

    Usage:
        raise APIException('Something went wrong', status_code=400)
    """
    retryable = False

    def __init__(self, message: str, status_code: int = 400, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(APIException):
    """Raised when request validation fails."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class OutOfRangeError(ValidationError):
    """Raised when a numeric value falls outside its allowed bounds."""
    def __init__(self, field: str, value, minimum, maximum):
        super().__init__(
            f'{field} must be between {minimum} and {maximum}',
            details={'field': field, 'value': str(value), 'min': str(minimum), 'max': str(maximum)},
        )


class AuthenticationError(APIException):
    """Raised when authentication fails."""
    def __init__(self, message: str = 'Authentication required'):
        super().__init__(message, status_code=401)


class ForbiddenError(APIException):
    """Raised when the caller's role or ownership does not allow the operation."""
    def __init__(self, message: str = 'Permission denied', details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class NotFoundError(APIException):
    """Raised when a resource is not found."""
    def __init__(self, message: str = 'Resource not found', details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class ConflictError(APIException):
    """Raised when there's a conflict (e.g., duplicate resource)."""
    def __init__(self, message: str = 'Resource conflict', details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class InvalidStateError(APIException):
    """Raised when an entity is of the wrong kind or in the wrong state."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class InvalidTransitionError(InvalidStateError):
    """Raised when a state machine transition is not allowed."""
    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            f'Cannot move {entity} from {current} to {requested}',
            details={'entity': entity, 'current': current, 'requested': requested},
        )


class DependencyFailureError(APIException):
    """Raised when the database is unavailable or a statement times out."""
    retryable = True

    def __init__(self, message: str = 'Storage temporarily unavailable, retry later'):
        super().__init__(message, status_code=503)
