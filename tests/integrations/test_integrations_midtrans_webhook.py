"""
🔔 Midtrans notification endpoint tests
Signature verification, deduplication, stale updates and error mapping.
"""

import json
from unittest.mock import patch

from django.conf import settings
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.billing.models import PaymentStatus
from apps.integrations.models import WebhookEvent
from apps.integrations.webhooks.midtrans import MidtransWebhookProcessor, compute_midtrans_signature
from tests.factories.checkout import create_order_with_payment, create_user

ORDER_NUMBER = 'ORD-20250101-00042'


def notification(
    transaction_status: str = 'settlement',
    status_code: str = '200',
    order_id: str = ORDER_NUMBER,
    gross_amount: str = '55.00',
    server_key: str | None = None,
) -> dict:
    """Notification body signed the way Midtrans signs it"""
    key = settings.MIDTRANS_SERVER_KEY if server_key is None else server_key
    return {
        'transaction_id': 'tx-abc-123',
        'order_id': order_id,
        'transaction_status': transaction_status,
        'status_code': status_code,
        'gross_amount': gross_amount,
        'payment_type': 'qris',
        'signature_key': compute_midtrans_signature(order_id, status_code, gross_amount, key),
    }


class MidtransWebhookEndpointTests(TestCase):

    def setUp(self):
        self.url = reverse('integrations:midtrans_webhook')
        self.user = create_user()

    def post(self, payload, **extra):
        body = payload if isinstance(payload, str) else json.dumps(payload)
        return self.client.post(self.url, data=body, content_type='application/json', **extra)

    def test_get_is_a_liveness_probe(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'active')
        self.assertIn('X-Request-ID', response)

    def test_settlement_marks_order_paid(self):
        order, payment = create_order_with_payment(self.user, order_number=ORDER_NUMBER)

        response = self.post(notification())

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])
        order.refresh_from_db()
        payment.refresh_from_db()
        self.assertEqual(order.payment_status, PaymentStatus.PAID)
        self.assertIsNotNone(order.paid_at)
        self.assertEqual(payment.status, PaymentStatus.PAID)

        event = WebhookEvent.objects.get()
        self.assertEqual(event.status, 'processed')
        self.assertEqual(event.event_id, 'tx-abc-123:settlement:200')
        self.assertEqual(event.order_number, ORDER_NUMBER)

    def test_redelivery_is_acknowledged_once(self):
        order, _ = create_order_with_payment(self.user, order_number=ORDER_NUMBER)
        self.post(notification())
        order.refresh_from_db()
        paid_at = order.paid_at

        response = self.post(notification())

        self.assertEqual(response.status_code, 200)
        self.assertIn('Duplicate', response.json()['message'])
        self.assertEqual(WebhookEvent.objects.count(), 1)
        order.refresh_from_db()
        self.assertEqual(order.paid_at, paid_at)

    def test_invalid_signature_is_rejected_without_side_effects(self):
        order, _ = create_order_with_payment(self.user, order_number=ORDER_NUMBER)

        response = self.post(notification(server_key='not-the-server-key'))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error']['kind'], 'invalid_signature')
        self.assertFalse(WebhookEvent.objects.exists())
        order.refresh_from_db()
        self.assertEqual(order.payment_status, PaymentStatus.PENDING)

    def test_tampered_amount_is_rejected(self):
        create_order_with_payment(self.user, order_number=ORDER_NUMBER)
        payload = notification()
        payload['gross_amount'] = '1.00'

        response = self.post(payload)

        self.assertEqual(response.status_code, 403)

    @override_settings(MIDTRANS_SERVER_KEY='')
    def test_missing_server_key_rejects_everything(self):
        create_order_with_payment(self.user, order_number=ORDER_NUMBER)

        response = self.post(notification(server_key='anything'))

        self.assertEqual(response.status_code, 403)

    def test_stale_update_is_skipped(self):
        order, _ = create_order_with_payment(self.user, order_number=ORDER_NUMBER)
        self.post(notification())

        response = self.post(notification(transaction_status='expire', status_code='407'))

        self.assertEqual(response.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, PaymentStatus.PAID)
        stale = WebhookEvent.objects.get(event_type='expire')
        self.assertEqual(stale.status, 'skipped')

    def test_unknown_order(self):
        response = self.post(notification(order_id='ORD-20250101-99999'))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['kind'], 'order_not_found')
        self.assertEqual(response.json()['error']['message'], 'Order not found')
        event = WebhookEvent.objects.get()
        self.assertEqual(event.status, 'failed')
        self.assertEqual(event.retry_count, 1)

    def test_order_without_payment_record(self):
        order, payment = create_order_with_payment(self.user, order_number=ORDER_NUMBER)
        payment.delete()

        response = self.post(notification())

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['kind'], 'payment_record_not_found')
        order.refresh_from_db()
        self.assertEqual(order.payment_status, PaymentStatus.PENDING)

    def test_failed_delivery_can_be_retried(self):
        self.post(notification())
        order, _ = create_order_with_payment(self.user, order_number=ORDER_NUMBER)

        response = self.post(notification())

        self.assertEqual(response.status_code, 200)
        event = WebhookEvent.objects.get()
        self.assertEqual(event.status, 'processed')
        self.assertEqual(event.retry_count, 1)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, PaymentStatus.PAID)

    def test_invalid_json(self):
        response = self.post('{not json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['kind'], 'validation_error')

    def test_missing_transaction_status(self):
        payload = notification()
        del payload['transaction_status']

        response = self.post(payload)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['message'], 'Missing transaction_status in notification')

    def test_forwarded_for_header_cannot_spoof_logged_ip(self):
        create_order_with_payment(self.user, order_number=ORDER_NUMBER)
        spoofed = {'REMOTE_ADDR': '10.0.0.9', 'HTTP_X_FORWARDED_FOR': '1.2.3.4'}

        with patch('apps.integrations.webhooks.base.log_security_event') as security_log:
            response = self.post(notification(server_key='not-the-server-key'), **spoofed)

        self.assertEqual(response.status_code, 403)
        event_type, _details, request_ip = security_log.call_args.args
        self.assertEqual(event_type, 'webhook_signature_invalid')
        self.assertEqual(request_ip, '10.0.0.9')

        self.post(notification(), **spoofed)
        self.assertEqual(WebhookEvent.objects.get().ip_address, '10.0.0.9')

    def test_unexpected_processing_error_is_internal_error(self):
        create_order_with_payment(self.user, order_number=ORDER_NUMBER)

        with patch(
            'apps.integrations.webhooks.midtrans.PaymentReconciliationService.apply_update',
            side_effect=RuntimeError('database went away'),
        ):
            response = self.post(notification())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['error']['kind'], 'internal_error')
        event = WebhookEvent.objects.get()
        self.assertEqual(event.status, 'failed')
        self.assertIn('database went away', event.error_message)


class MidtransSignatureTests(TestCase):

    def test_signature_is_sha512_hex(self):
        signature = compute_midtrans_signature('ORD-1', '200', '55.00', 'key')

        self.assertEqual(len(signature), 128)
        self.assertNotEqual(signature, compute_midtrans_signature('ORD-1', '200', '55.01', 'key'))

    def test_non_ascii_signature_does_not_raise(self):
        processor = MidtransWebhookProcessor()
        payload = notification()

        self.assertFalse(processor.verify_signature(payload, 'ü' * 128))
        self.assertTrue(processor.verify_signature(payload, ''))
