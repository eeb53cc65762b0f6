"""
🔄 Payment reconciliation tests
Provider status mapping, the monotonic status guard and order/payment updates.
"""

from django.test import SimpleTestCase, TestCase

from apps.billing.models import PaymentStatus
from apps.billing.services import (
    PaymentReconciliationService,
    PaymentStatusTransitions,
    ProviderStatusUpdate,
    map_provider_status,
)
from tests.factories.checkout import create_order_with_payment, create_user


class ProviderStatusMappingTests(SimpleTestCase):

    def test_known_statuses(self):
        self.assertEqual(map_provider_status('capture'), PaymentStatus.PAID)
        self.assertEqual(map_provider_status('settlement'), PaymentStatus.PAID)
        for failed in ('deny', 'cancel', 'expire', 'failure'):
            self.assertEqual(map_provider_status(failed), PaymentStatus.FAILED)
        self.assertEqual(map_provider_status('refund'), PaymentStatus.REFUNDED)
        self.assertEqual(map_provider_status('partial_refund'), PaymentStatus.REFUNDED)

    def test_pending_and_unknown_stay_pending(self):
        self.assertEqual(map_provider_status('pending'), PaymentStatus.PENDING)
        self.assertEqual(map_provider_status('authorize'), PaymentStatus.PENDING)
        self.assertEqual(map_provider_status(None), PaymentStatus.PENDING)

    def test_transitions(self):
        self.assertTrue(PaymentStatusTransitions.is_allowed(PaymentStatus.PENDING, PaymentStatus.PAID))
        self.assertTrue(PaymentStatusTransitions.is_allowed(PaymentStatus.PAID, PaymentStatus.REFUNDED))
        self.assertTrue(PaymentStatusTransitions.is_allowed(PaymentStatus.PAID, PaymentStatus.PAID))
        self.assertFalse(PaymentStatusTransitions.is_allowed(PaymentStatus.PAID, PaymentStatus.PENDING))
        self.assertFalse(PaymentStatusTransitions.is_allowed(PaymentStatus.PAID, PaymentStatus.FAILED))
        self.assertFalse(PaymentStatusTransitions.is_allowed(PaymentStatus.FAILED, PaymentStatus.PAID))

    def test_update_from_bank_transfer_notification(self):
        update = ProviderStatusUpdate.from_provider_payload({
            'transaction_status': 'settlement',
            'transaction_id': 'tx-1',
            'payment_type': 'bank_transfer',
            'va_numbers': [{'bank': 'bca', 'va_number': '123'}],
        })

        self.assertEqual(update.status, PaymentStatus.PAID)
        self.assertEqual(update.va_number, '123')
        self.assertEqual(update.va_bank, 'BCA')


class PaymentReconciliationServiceTests(TestCase):

    def setUp(self):
        self.order, self.payment = create_order_with_payment(create_user())

    def apply(self, transaction_status: str):
        update = ProviderStatusUpdate.from_provider_payload(
            {'transaction_status': transaction_status, 'transaction_id': 'tx-abc-123'}
        )
        return PaymentReconciliationService.apply_update(self.order, self.payment, update)

    def test_settlement_marks_order_paid(self):
        outcome = self.apply('settlement')

        self.assertTrue(outcome.applied)
        self.order.refresh_from_db()
        self.payment.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.PAID)
        self.assertIsNotNone(self.order.paid_at)
        self.assertEqual(self.payment.status, PaymentStatus.PAID)
        self.assertEqual(self.payment.raw_response['transaction_status'], 'settlement')

    def test_repeated_settlement_keeps_first_paid_at(self):
        self.apply('settlement')
        self.order.refresh_from_db()
        first_paid_at = self.order.paid_at

        outcome = self.apply('capture')

        self.assertTrue(outcome.applied)
        self.order.refresh_from_db()
        self.assertEqual(self.order.paid_at, first_paid_at)

    def test_stale_failure_after_payment_is_ignored(self):
        self.apply('settlement')

        outcome = self.apply('expire')

        self.assertFalse(outcome.applied)
        self.assertEqual(outcome.status, PaymentStatus.PAID)
        self.order.refresh_from_db()
        self.payment.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.PAID)
        self.assertEqual(self.payment.status, PaymentStatus.PAID)

    def test_refund_after_payment(self):
        self.apply('settlement')

        outcome = self.apply('refund')

        self.assertTrue(outcome.applied)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.REFUNDED)

    def test_latest_transaction(self):
        self.assertEqual(PaymentReconciliationService.latest_transaction(self.order), self.payment)
