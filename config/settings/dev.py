"""
Development settings for Storefront Checkout
Fast iteration with debugging enabled.
"""

import os

from .base import *  # noqa: F403

# ===============================================================================
# DEVELOPMENT FLAGS
# ===============================================================================

DEBUG = True
ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']  # noqa: S104

# ===============================================================================
# DATABASE FOR DEVELOPMENT (SQLite for speed)
# ===============================================================================

if os.environ.get("USE_POSTGRES") != "true":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": str(BASE_DIR / "db.sqlite3"),  # noqa: F405
        }
    }

# ===============================================================================
# CACHE (In-memory unless Redis is requested)
# ===============================================================================

if os.environ.get("USE_REDIS") != "true":
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "storefront-cache",
        }
    }
    SESSION_ENGINE = "django.contrib.sessions.backends.db"

# ===============================================================================
# DJANGO REST FRAMEWORK (Browsable API in development)
# ===============================================================================

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
        "rest_framework.renderers.BrowsableAPIRenderer",
    ],
}

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
