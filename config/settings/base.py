"""
Django Base Settings for the Referral Backend

This file contains all shared settings used across environments.
Environment-specific settings are in development.py, production.py and test.py.
"""
from decimal import Decimal
from pathlib import Path

from decouple import Csv, config

# Build paths inside the project like this: BASE_DIR / 'subdir'
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# =============================================================================
# Core Settings
# =============================================================================

SECRET_KEY = config('DJANGO_SECRET_KEY', default='django-insecure-change-me-in-production')

DEBUG = config('DJANGO_DEBUG', default=True, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# =============================================================================
# Application Definition
# =============================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',
    'corsheaders',

    # Local apps
    'apps.core',       # Principal, Lead, Payout models; auth; errors
    'apps.agents',     # Registration, approval, hierarchy, commission rates
    'apps.leads',      # Lead lifecycle
    'apps.payouts',    # Monthly commission accrual and payment
    'apps.dashboard',  # Read-side rollups
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'config.urls'

# =============================================================================
# Templates (required for admin)
# =============================================================================

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# =============================================================================
# Database
# Every store call runs under a server-side statement timeout so that no
# operation blocks indefinitely.
# =============================================================================

DB_STATEMENT_TIMEOUT_MS = config('DB_STATEMENT_TIMEOUT_MS', default=5000, cast=int)

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': config('DB_NAME', default='referral'),
        'USER': config('DB_USER', default='postgres'),
        'PASSWORD': config('DB_PASSWORD', default=''),
        'HOST': config('DB_HOST', default='localhost'),
        'PORT': config('DB_PORT', default='5432'),
        'OPTIONS': {
            'sslmode': config('DB_SSLMODE', default='require'),
            'connect_timeout': config('DB_CONNECT_TIMEOUT', default=5, cast=int),
            'options': f'-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}',
        },
    }
}

# =============================================================================
# Authentication
# Tokens are issued elsewhere; this service only verifies them.
# =============================================================================

AUTH_JWT_SECRET = config('AUTH_JWT_SECRET', default='')
AUTH_JWT_ALGORITHMS = ['HS256']

# =============================================================================
# REST Framework
# =============================================================================

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'apps.core.authentication.PrincipalJWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'apps.core.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'apps.core.exceptions.custom_exception_handler',
    'COERCE_DECIMAL_TO_STRING': True,
    'UNAUTHENTICATED_USER': None,
}

# =============================================================================
# CORS Configuration
# =============================================================================

CORS_ALLOWED_ORIGINS = config(
    'CORS_ALLOWED_ORIGINS',
    default='http://localhost:3000',
    cast=Csv()
)

CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = [
    'accept',
    'accept-encoding',
    'authorization',
    'content-type',
    'origin',
    'user-agent',
    'x-csrftoken',
    'x-requested-with',
]

# =============================================================================
# Internationalization
# =============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True

# =============================================================================
# Static files
# =============================================================================

STATIC_URL = '/static/'

# =============================================================================
# Business Settings
# =============================================================================

# Rate (percent) given to a newly registered agent
DEFAULT_AGENT_COMMISSION_RATE = config(
    'DEFAULT_AGENT_COMMISSION_RATE', default='2.00', cast=Decimal
)

# Share of the parent agent's rate a sub-agent inherits
SUB_AGENT_RATE_FACTOR = Decimal('0.5')

# Who a sub-agent's lead is credited to: 'parent' or 'self'
SUB_AGENT_LEAD_CREDIT = config('SUB_AGENT_LEAD_CREDIT', default='parent')

AGENT_CODE_PREFIX = 'AG'
AGENT_CODE_WIDTH = 4
AGENT_CODE_MAX_ATTEMPTS = config('AGENT_CODE_MAX_ATTEMPTS', default=5, cast=int)

PAYOUT_STATISTICS_MONTHS = 12

DASHBOARD_WINDOW_MONTHS = 6
DASHBOARD_COMMISSION_DAYS = 30
DASHBOARD_GOALS = {
    'monthly_commission': Decimal('100000'),
    'aum': Decimal('10000000'),
}

# =============================================================================
# Logging
# =============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': config('DJANGO_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': config('APPS_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
    },
}

# =============================================================================
# Default primary key field type
# =============================================================================

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
