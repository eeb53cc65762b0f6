"""
Production settings for Storefront Checkout
Security-first configuration.
"""

import os

from .base import *  # noqa: F403

# ===============================================================================
# PRODUCTION SECURITY VALIDATION
# ===============================================================================

validate_production_secret_key()  # noqa: F405

if not MIDTRANS_SERVER_KEY:  # noqa: F405
    raise ValueError("🔥 CRITICAL CONFIGURATION ERROR: MIDTRANS_SERVER_KEY must be set in production!")

# ===============================================================================
# PRODUCTION FLAGS
# ===============================================================================

DEBUG = False

ALLOWED_HOSTS = [host for host in os.environ.get('ALLOWED_HOSTS', '').split(',') if host]

# ===============================================================================
# SECURITY SETTINGS
# ===============================================================================

# Force HTTPS
SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# Secure cookies
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True

# HSTS (HTTP Strict Transport Security)
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'

# Provider notifications hit the webhook over plain POST behind the proxy
SECURE_REDIRECT_EXEMPT = [r'^integrations/webhooks/']

# ===============================================================================
# DATABASE PRODUCTION SETTINGS
# ===============================================================================

DATABASES['default'].update({  # noqa: F405
    'CONN_MAX_AGE': 600,
    'OPTIONS': {
        'application_name': 'storefront_checkout_prod',
        'sslmode': 'require',
    }
})

# ===============================================================================
# LOGGING CONFIGURATION (Production)
# ===============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'json': {
            'format': '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "request_id": "%(request_id)s"}',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'filters': {
        'add_request_id': {
            '()': 'apps.common.logging.RequestIDFilter',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'json',
            'filters': ['add_request_id'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django.security': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}

# ===============================================================================
# CACHE CONFIGURATION (Redis Production)
# ===============================================================================

CACHES['default'].update({  # noqa: F405
    'OPTIONS': {
        'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        'CONNECTION_POOL_KWARGS': {
            'max_connections': 20,
            'retry_on_timeout': True,
        },
        'SERIALIZER': 'django_redis.serializers.json.JSONSerializer',
    }
})

# ===============================================================================
# SESSION CONFIGURATION (Production)
# ===============================================================================

SESSION_COOKIE_AGE = 3600  # 1 hour
SESSION_COOKIE_NAME = 'storefront_sessionid'
