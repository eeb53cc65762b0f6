"""
Webhook delivery log admin tests.
"""

from django.contrib import admin
from django.test import RequestFactory, TestCase

from apps.integrations.admin import WebhookEventAdmin
from apps.integrations.models import WebhookEvent


class WebhookEventAdminTests(TestCase):

    def test_registered_read_only(self):
        model_admin = admin.site._registry[WebhookEvent]

        self.assertIsInstance(model_admin, WebhookEventAdmin)
        self.assertFalse(model_admin.has_add_permission(RequestFactory().get('/admin/')))
        self.assertIn('payload', model_admin.readonly_fields)
        self.assertIn('ip_address', model_admin.readonly_fields)
