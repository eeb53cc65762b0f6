"""
🌐 Checkout API tests
Authentication, request validation and response shapes of the checkout endpoints.
"""

from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from apps.billing.gateways import PaymentGatewayError
from apps.billing.models import PaymentStatus
from apps.orders.models import Order
from tests.factories.checkout import (
    create_address,
    create_cart,
    create_order_with_payment,
    create_product,
    create_user,
)


class CheckoutAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user()
        self.address = create_address(self.user)
        self.product = create_product('Canvas Tote', price='25.00', stock=5)
        self.client.force_authenticate(user=self.user)


class AuthenticationTests(TestCase):

    def test_anonymous_callers_get_401(self):
        client = APIClient()
        urls = [
            reverse('orders:checkout_validate'),
            reverse('orders:checkout_calculate'),
            reverse('orders:checkout'),
            reverse('orders:sync_payment', args=['ORD-20250101-00001']),
        ]
        for url in urls:
            with self.subTest(url=url):
                response = client.post(url, {}, format='json')

                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()['error']['kind'], 'unauthorized')


class ValidateCheckoutTests(CheckoutAPITestCase):

    def test_reports_every_problem_and_prices_eligible_lines(self):
        scarce = create_product('Enamel Mug', price='8.00', stock=3)
        create_cart(self.user, (self.product, 2), (scarce, 10))

        response = self.client.post(reverse('orders:checkout_validate'), {}, format='json')

        self.assertEqual(response.status_code, 200)
        validation = response.json()['validation']
        self.assertFalse(validation['valid'])
        self.assertEqual(validation['errors'], ['Enamel Mug: only 3 left in stock'])
        self.assertEqual(validation['summary']['itemCount'], 2)
        self.assertEqual(validation['summary']['subtotal'], '50.00')
        self.assertEqual(validation['summary']['total'], '55.00')

    def test_empty_cart(self):
        response = self.client.post(reverse('orders:checkout_validate'), {}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['kind'], 'cart_empty')

    def test_validation_never_writes(self):
        create_cart(self.user, (self.product, 2))

        self.client.post(reverse('orders:checkout_validate'), {}, format='json')

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)
        self.assertFalse(Order.objects.exists())


class CalculateTotalsTests(CheckoutAPITestCase):

    def test_totals(self):
        create_cart(self.user, (self.product, 1))

        response = self.client.post(reverse('orders:checkout_calculate'), {}, format='json')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['subtotal'], '25.00')
        self.assertEqual(data['tax'], '2.50')
        self.assertEqual(data['shipping'], '5.00')
        # 25 + 3 (tax rounded half-up) + 5
        self.assertEqual(data['total'], '33.00')


class CreateCheckoutTests(CheckoutAPITestCase):

    def test_cash_on_delivery(self):
        create_cart(self.user, (self.product, 2))

        response = self.client.post(
            reverse('orders:checkout'),
            {'addressId': str(self.address.id), 'paymentMethod': 'COD', 'notes': 'Ring twice'},
            format='json',
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['message'], 'Order created successfully')
        self.assertRegex(body['data']['orderNumber'], r'^ORD-\d{8}-\d{5}$')

        order = body['data']['order']
        self.assertEqual(order['total'], '55.00')
        self.assertEqual(order['paymentStatus'], 'PENDING')
        self.assertEqual(order['notes'], 'Ring twice')
        self.assertEqual(order['items'][0]['quantity'], 2)
        self.assertEqual(order['payment']['provider'], 'OFFLINE')

    def test_invalid_payment_method(self):
        response = self.client.post(
            reverse('orders:checkout'),
            {'addressId': str(self.address.id), 'paymentMethod': 'CRYPTO'},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        error = response.json()['error']
        self.assertEqual(error['kind'], 'validation_error')
        self.assertEqual(error['message'], 'Invalid payment method')

    def test_virtual_account_requires_bank(self):
        response = self.client.post(
            reverse('orders:checkout'),
            {'addressId': str(self.address.id), 'paymentMethod': 'VIRTUAL_ACCOUNT'},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['message'], 'Virtual account bank is required')

    def test_notes_length_limit(self):
        response = self.client.post(
            reverse('orders:checkout'),
            {'addressId': str(self.address.id), 'paymentMethod': 'COD', 'notes': 'x' * 501},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['message'], 'Notes must be less than 500 characters')

    def test_insufficient_stock(self):
        create_cart(self.user, (self.product, 6))

        response = self.client.post(
            reverse('orders:checkout'),
            {'addressId': str(self.address.id), 'paymentMethod': 'COD'},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['kind'], 'insufficient_stock')
        self.assertFalse(Order.objects.exists())


class SyncPaymentTests(CheckoutAPITestCase):

    def url(self, order_number: str = 'ORD-20250101-00042') -> str:
        return reverse('orders:sync_payment', args=[order_number])

    def test_unknown_order(self):
        response = self.client.post(self.url(), {}, format='json')

        self.assertEqual(response.status_code, 404)

    def test_order_of_another_customer(self):
        create_order_with_payment(create_user('stranger', 'stranger@example.com'))

        response = self.client.post(self.url(), {}, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error']['kind'], 'forbidden')

    def test_provider_status_is_applied(self):
        create_order_with_payment(self.user)

        with patch('apps.orders.services.MidtransGateway') as gateway_class:
            gateway_class.return_value.get_transaction_status.return_value = {
                'transaction_status': 'settlement',
                'transaction_id': 'tx-abc-123',
            }
            response = self.client.post(self.url(), {}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['paymentStatus'], PaymentStatus.PAID)
        gateway_class.return_value.get_transaction_status.assert_called_once_with('tx-abc-123')

    def test_provider_unreachable(self):
        create_order_with_payment(self.user)

        with patch('apps.orders.services.MidtransGateway') as gateway_class:
            gateway_class.return_value.get_transaction_status.side_effect = PaymentGatewayError('Payment provider timed out')
            response = self.client.post(self.url(), {}, format='json')

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()['error']['kind'], 'payment_sync_failed')

    def test_order_without_provider_transaction(self):
        create_order_with_payment(self.user, transaction_id='')

        response = self.client.post(self.url(), {}, format='json')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['kind'], 'payment_record_not_found')


class OrderDetailTests(CheckoutAPITestCase):

    def url(self, order_number: str = 'ORD-20250101-00042') -> str:
        return reverse('orders:order_detail', args=[order_number])

    def test_anonymous_caller_gets_401(self):
        response = APIClient().get(self.url())

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error']['kind'], 'unauthorized')

    def test_unknown_order(self):
        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['kind'], 'order_not_found')

    def test_order_of_another_customer(self):
        create_order_with_payment(create_user('stranger', 'stranger@example.com'))

        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error']['kind'], 'forbidden')

    def test_pending_order_awaiting_notification(self):
        create_order_with_payment(self.user)

        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['orderNumber'], 'ORD-20250101-00042')
        self.assertEqual(data['paymentStatus'], PaymentStatus.PENDING)
        self.assertIsNone(data['paidAt'])
        self.assertEqual(data['payment']['transactionId'], 'tx-abc-123')
        self.assertIsNone(data['shippingAddress'])

    def test_checked_out_order_shows_shipping_snapshot(self):
        create_cart(self.user, (self.product, 1))
        created = self.client.post(
            reverse('orders:checkout'),
            {'addressId': str(self.address.id), 'paymentMethod': 'COD'},
            format='json',
        )
        order_number = created.json()['data']['orderNumber']

        response = self.client.get(self.url(order_number))

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['shippingAddress']['city'], 'Jakarta')
        self.assertEqual(data['shippingAddress']['fullName'], 'Budi Santoso')
        self.assertEqual(data['items'][0]['productName'], 'Canvas Tote')
