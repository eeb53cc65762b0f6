from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class IntegrationsConfig(AppConfig):
    """
    🔌 Payment provider integrations

    Handles:
    - Midtrans HTTP notifications (signature check, dedup, reconciliation)
    - Webhook event audit trail
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.integrations'
    verbose_name = _('🔌 Integrations')
