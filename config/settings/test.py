"""
Django Test Settings for the Referral Backend

Uses SQLite by default for fast testing. Set TEST_DB_ENGINE=postgresql to
run against PostgreSQL, which also enables the threaded concurrency tests.
"""
from .base import *  # noqa: F401, F403

# =============================================================================
# Debug Mode for Tests
# =============================================================================

DEBUG = False

# =============================================================================
# Database
# =============================================================================

TEST_DB_ENGINE = config('TEST_DB_ENGINE', default='sqlite3')  # noqa: F405

if TEST_DB_ENGINE == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': config('TEST_DB_NAME', default='referral_test'),  # noqa: F405
            'USER': config('TEST_DB_USER', default='postgres'),  # noqa: F405
            'PASSWORD': config('TEST_DB_PASSWORD', default='postgres'),  # noqa: F405
            'HOST': config('TEST_DB_HOST', default='localhost'),  # noqa: F405
            'PORT': config('TEST_DB_PORT', default='5432'),  # noqa: F405
            'OPTIONS': {
                'options': f'-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}',  # noqa: F405
            },
            'TEST': {
                'NAME': 'referral_test',
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'test.sqlite3',  # noqa: F405
        }
    }

# =============================================================================
# Speed Optimizations for Tests
# =============================================================================

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Disable logging during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
}

# =============================================================================
# Authentication
# =============================================================================

AUTH_JWT_SECRET = 'test-jwt-secret-key-for-testing-purposes-only'

# =============================================================================
# Business Settings
# =============================================================================

DEFAULT_AGENT_COMMISSION_RATE = Decimal('2.00')  # noqa: F405
SUB_AGENT_LEAD_CREDIT = 'parent'

# =============================================================================
# CORS - Allow all for tests
# =============================================================================

CORS_ALLOW_ALL_ORIGINS = True
