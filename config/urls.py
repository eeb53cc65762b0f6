"""
URL configuration for Storefront Checkout
"""

from django.contrib import admin
from django.urls import include, path

# ===============================================================================
# MAIN URL PATTERNS
# ===============================================================================

urlpatterns = [
    path("admin/", admin.site.urls),
    # Checkout & order API
    path("api/", include("apps.orders.urls")),
    # External integrations & webhooks
    path("integrations/", include("apps.integrations.urls")),
]
