"""
🛒 Checkout orchestration tests
Cart snapshot → eligibility → pricing → payment intent → atomic commit.
"""

from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase

from apps.billing.gateways import PaymentInstruction
from apps.billing.models import PaymentMethod, PaymentProvider, PaymentStatus, PaymentTransaction
from apps.cart.models import CartItem
from apps.cart.services import CartSnapshotService
from apps.common.errors import CheckoutErrorKind
from apps.orders.models import Order, OrderItem
from apps.orders.pricing import PricingService
from apps.orders.services import CheckoutRequestData, CheckoutService, OrderCommitService
from tests.factories.checkout import create_address, create_cart, create_product, create_user

MIDTRANS_REQUEST = 'apps.billing.gateways.midtrans.MidtransGateway._request'

VA_CHARGE_RESPONSE = {
    'status_code': '201',
    'status_message': 'Success, Bank Transfer transaction is created',
    'transaction_id': 'tx-va-001',
    'order_id': 'ORD-20250101-00001',
    'gross_amount': '55.00',
    'payment_type': 'bank_transfer',
    'transaction_status': 'pending',
    'va_numbers': [{'bank': 'bca', 'va_number': '12345678901'}],
    'expiry_time': '2025-01-02 10:00:00',
}


class CheckoutServiceTests(TestCase):

    def setUp(self):
        self.user = create_user()
        self.address = create_address(self.user)
        self.product = create_product('Canvas Tote', price='25.00', stock=5)

    def cod(self, **overrides) -> CheckoutRequestData:
        values = {'address_id': self.address.id, 'payment_method': PaymentMethod.COD}
        values.update(overrides)
        return CheckoutRequestData(**values)

    def test_cash_on_delivery_checkout_creates_order(self):
        create_cart(self.user, (self.product, 2))

        result = CheckoutService.checkout(self.user, self.cod(notes='Leave at the door'))

        self.assertTrue(result.is_ok(), result)
        order = result.unwrap()
        self.assertEqual(order.total, Decimal('55.00'))
        self.assertEqual(order.subtotal, Decimal('50.00'))
        self.assertEqual(order.tax, Decimal('5.00'))
        self.assertEqual(order.payment_status, PaymentStatus.PENDING)
        self.assertEqual(order.notes, 'Leave at the door')

        item = OrderItem.objects.get(order=order)
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.price, Decimal('25.00'))
        self.assertEqual(item.total, Decimal('50.00'))

        self.assertEqual(order.shipping_address.city, 'Jakarta')

        payment = PaymentTransaction.objects.get(order=order)
        self.assertEqual(payment.provider, PaymentProvider.OFFLINE)
        self.assertEqual(payment.amount, Decimal('55.00'))

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
        self.assertEqual(self.product.sales_count, 2)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())

    def test_address_of_another_customer_is_rejected(self):
        create_cart(self.user, (self.product, 1))
        stranger_address = create_address(create_user('stranger', 'stranger@example.com'))

        result = CheckoutService.checkout(self.user, self.cod(address_id=stranger_address.id))

        self.assertEqual(result.unwrap_err().kind, CheckoutErrorKind.INVALID_ADDRESS)
        self.assertEqual(result.unwrap_err().message, 'Invalid address')

    def test_empty_cart_is_rejected(self):
        result = CheckoutService.checkout(self.user, self.cod())

        self.assertEqual(result.unwrap_err().kind, CheckoutErrorKind.CART_EMPTY)

    def test_ineligible_cart_creates_nothing(self):
        create_cart(self.user, (self.product, 10))

        result = CheckoutService.checkout(self.user, self.cod())

        error = result.unwrap_err()
        self.assertEqual(error.kind, CheckoutErrorKind.INSUFFICIENT_STOCK)
        self.assertEqual(error.details, ['Canvas Tote: only 5 left in stock'])
        self.assertFalse(Order.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_split_lines_over_stock_are_rejected_before_payment_intent(self):
        cart = create_cart(self.user)
        CartItem.objects.create(cart=cart, product=self.product, quantity=3, selected_color='Black')
        CartItem.objects.create(cart=cart, product=self.product, quantity=3, selected_color='White')

        preview = CheckoutService.preview(self.user).unwrap()
        self.assertEqual(preview.report.messages, ['Canvas Tote: only 5 left in stock'])

        with patch(MIDTRANS_REQUEST) as request:
            result = CheckoutService.checkout(self.user, self.cod(payment_method=PaymentMethod.QRIS))

        self.assertEqual(result.unwrap_err().kind, CheckoutErrorKind.INSUFFICIENT_STOCK)
        request.assert_not_called()
        self.assertFalse(Order.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_virtual_account_checkout_stores_instructions(self):
        create_cart(self.user, (self.product, 2))

        with patch(MIDTRANS_REQUEST, return_value=(VA_CHARGE_RESPONSE, True)) as request:
            result = CheckoutService.checkout(
                self.user, self.cod(payment_method=PaymentMethod.VIRTUAL_ACCOUNT, payment_channel='BCA')
            )

        order = result.unwrap()
        self.assertEqual(order.transaction_id, 'tx-va-001')
        self.assertEqual(order.payment_channel, 'BCA')

        payment = PaymentTransaction.objects.get(order=order)
        self.assertEqual(payment.provider, PaymentProvider.MIDTRANS)
        self.assertEqual(payment.va_number, '12345678901')
        self.assertEqual(payment.va_bank, 'BCA')
        self.assertIsNotNone(payment.expires_at)

        method, path = request.call_args.args
        charge = request.call_args.kwargs['json']
        self.assertEqual((method, path), ('POST', '/v2/charge'))
        self.assertEqual(charge['transaction_details']['gross_amount'], 55)
        self.assertEqual(charge['bank_transfer'], {'bank': 'bca'})

    def test_payment_intent_failure_creates_nothing(self):
        create_cart(self.user, (self.product, 1))
        rejected = {'status_code': '401', 'status_message': 'Unknown Merchant server_key/id'}

        with patch(MIDTRANS_REQUEST, return_value=(rejected, False)):
            result = CheckoutService.checkout(self.user, self.cod(payment_method=PaymentMethod.QRIS))

        error = result.unwrap_err()
        self.assertEqual(error.kind, CheckoutErrorKind.PAYMENT_INTENT_FAILED)
        self.assertIn('Invalid Midtrans server key', error.message)
        self.assertFalse(Order.objects.exists())
        self.assertTrue(CartItem.objects.filter(cart__user=self.user).exists())


class OrderCommitAtomicityTests(TestCase):
    """A failure anywhere in the commit leaves no trace in the database"""

    def setUp(self):
        self.user = create_user()
        self.address = create_address(self.user)
        self.product = create_product('Canvas Tote', price='25.00', stock=5)
        create_cart(self.user, (self.product, 2))
        self.snapshot = CartSnapshotService.load_snapshot(self.user).unwrap()
        self.breakdown = PricingService.calculate(self.snapshot.lines)
        self.data = CheckoutRequestData(address_id=self.address.id, payment_method=PaymentMethod.COD)
        self.instruction = PaymentInstruction(
            provider=PaymentProvider.OFFLINE, payment_type='cod', amount=self.breakdown.rounded_total
        )

    def commit(self):
        return OrderCommitService.commit(
            self.user, 'ORD-20250101-00001', self.snapshot, self.breakdown, self.address, self.data, self.instruction
        )

    def test_failure_after_stock_decrement_rolls_everything_back(self):
        with (
            patch.object(OrderCommitService, '_clear_cart', side_effect=RuntimeError('disk full')),
            patch('apps.orders.services.log_security_event') as security_log,
        ):
            result = self.commit()

        error = result.unwrap_err()
        self.assertEqual(error.kind, CheckoutErrorKind.COMMIT_FAILED)
        self.assertEqual(error.message, 'Failed to create order')
        self.assertEqual(error.http_status, 500)

        self.assertFalse(Order.objects.exists())
        self.assertFalse(PaymentTransaction.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)
        self.assertEqual(self.product.sales_count, 0)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

        security_log.assert_called_once()
        self.assertEqual(security_log.call_args.args[0], 'orphaned_payment_intent')

    def test_stock_sold_elsewhere_is_not_oversold(self):
        # Another checkout took the stock after this cart was validated
        type(self.product).objects.filter(pk=self.product.pk).update(stock_quantity=1)

        result = self.commit()

        error = result.unwrap_err()
        self.assertEqual(error.kind, CheckoutErrorKind.INSUFFICIENT_STOCK)
        self.assertFalse(Order.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 1)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

    def test_successful_commit(self):
        order = self.commit().unwrap()

        self.assertEqual(order.order_number, 'ORD-20250101-00001')
        self.assertEqual(order.total, self.breakdown.rounded_total)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
