"""
Test settings for Storefront Checkout
Fast, isolated testing environment.
"""

from .base import *  # noqa: F403

# ===============================================================================
# TEST FLAGS
# ===============================================================================

DEBUG = False

# ===============================================================================
# TEST DATABASE (In-memory for speed)
# ===============================================================================

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'OPTIONS': {
            'timeout': 20,
        }
    }
}

# ===============================================================================
# TEST CACHE (Local memory)
# ===============================================================================

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'test-cache',
    }
}

SESSION_ENGINE = 'django.contrib.sessions.backends.db'

# ===============================================================================
# PASSWORD HASHER (Fast for tests)
# ===============================================================================

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',  # Fast but insecure (test only)
]

# ===============================================================================
# LOGGING (Minimal for tests)
# ===============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
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

# ===============================================================================
# DJANGO REST FRAMEWORK (Throttles out of the way)
# ===============================================================================

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'DEFAULT_THROTTLE_RATES': {
        'checkout': '10000/min',
        'checkout_preview': '10000/min',
    },
}

# ===============================================================================
# CHECKOUT (Pinned for deterministic totals)
# ===============================================================================

CHECKOUT_TAX_RATE = '0.10'
CHECKOUT_FREE_SHIPPING_THRESHOLD = '50.00'
CHECKOUT_FLAT_SHIPPING_FEE = '5.00'
CHECKOUT_SHIPPING_POLICY = 'flat'
ORDER_NUMBER_MAX_ATTEMPTS = 10
APP_BASE_URL = 'http://testserver'

# ===============================================================================
# EXTERNAL SERVICES (Disabled in tests)
# ===============================================================================

MIDTRANS_SERVER_KEY = 'SB-Mid-server-test-key'  # noqa: S105
MIDTRANS_BASE_URL = 'https://api.sandbox.midtrans.com'
MIDTRANS_REQUEST_TIMEOUT = 5

# ===============================================================================
# SECURITY (Relaxed for tests)
# ===============================================================================

SECRET_KEY = 'django-test-key-not-secure'  # noqa: S105
ALLOWED_HOSTS = ['testserver', 'localhost', '127.0.0.1']

# Forwarding headers are ignored unless a test trusts a proxy explicitly
IPWARE_TRUSTED_PROXY_LIST: list[str] = []
