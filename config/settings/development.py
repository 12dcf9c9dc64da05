"""
Django Development Settings

Local API against a local PostgreSQL, with a throwaway JWT secret so tokens
can be minted by hand while poking at endpoints.
"""
from .base import *  # noqa: F401, F403

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

# Local frontend dev server
CORS_ALLOWED_ORIGINS = [
    'http://localhost:3000',
    'http://127.0.0.1:3000',
]

# =============================================================================
# Database
# =============================================================================

DATABASES['default']['OPTIONS']['sslmode'] = config('DB_SSLMODE', default='prefer')  # noqa: F405

# Long enough to step through a decide/accrue transaction in a debugger
DB_STATEMENT_TIMEOUT_MS = config('DB_STATEMENT_TIMEOUT_MS', default=60000, cast=int)  # noqa: F405
DATABASES['default']['OPTIONS']['options'] = f'-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}'  # noqa: F405

# =============================================================================
# Authentication
# =============================================================================

AUTH_JWT_SECRET = config('AUTH_JWT_SECRET', default='dev-only-jwt-secret')  # noqa: F405

# =============================================================================
# Logging
# =============================================================================

LOGGING['root']['level'] = 'DEBUG'  # noqa: F405
LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405
