"""
Django Production Settings

Secrets and hosts must come from the environment; there are no defaults.
"""
from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F401, F403

DEBUG = False

ALLOWED_HOSTS = config('ALLOWED_HOSTS', cast=Csv())  # noqa: F405

SECRET_KEY = config('DJANGO_SECRET_KEY')  # noqa: F405

# =============================================================================
# Authentication
# =============================================================================

AUTH_JWT_SECRET = config('AUTH_JWT_SECRET')  # noqa: F405

if len(AUTH_JWT_SECRET) < 32:
    raise ImproperlyConfigured('AUTH_JWT_SECRET must be at least 32 characters')

if SUB_AGENT_LEAD_CREDIT not in ('parent', 'self'):  # noqa: F405
    raise ImproperlyConfigured(
        f"SUB_AGENT_LEAD_CREDIT must be 'parent' or 'self', got {SUB_AGENT_LEAD_CREDIT!r}"  # noqa: F405
    )

# =============================================================================
# HTTPS
# =============================================================================

SECURE_SSL_REDIRECT = config('SECURE_SSL_REDIRECT', default=True, cast=bool)  # noqa: F405
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
X_FRAME_OPTIONS = 'DENY'

CORS_ALLOWED_ORIGINS = config('CORS_ALLOWED_ORIGINS', cast=Csv())  # noqa: F405

# =============================================================================
# Database
# =============================================================================

DATABASES['default']['OPTIONS']['sslmode'] = 'require'  # noqa: F405
DATABASES['default']['CONN_MAX_AGE'] = config('DB_CONN_MAX_AGE', default=60, cast=int)  # noqa: F405
DATABASES['default']['CONN_HEALTH_CHECKS'] = True  # noqa: F405

# =============================================================================
# Logging
# =============================================================================

LOGGING['root']['level'] = 'INFO'  # noqa: F405
LOGGING['loggers']['django']['level'] = 'WARNING'  # noqa: F405
