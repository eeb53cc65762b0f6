"""
Money helpers and the checkout error taxonomy
"""

from decimal import Decimal

from django.test import SimpleTestCase

from apps.common.errors import CheckoutError, CheckoutErrorKind
from apps.common.types import Err, Ok
from apps.common.utils import format_percent, mask_sensitive_data, quantize_money, whole_units


class MoneyHelperTests(SimpleTestCase):

    def test_quantize_rounds_half_up(self):
        self.assertEqual(quantize_money(Decimal('2.345')), Decimal('2.35'))
        self.assertEqual(quantize_money(Decimal('2.344')), Decimal('2.34'))

    def test_whole_units_rounds_half_up(self):
        self.assertEqual(whole_units(Decimal('10.50')), 11)
        self.assertEqual(whole_units(Decimal('10.49')), 10)
        self.assertEqual(whole_units(Decimal('2.5')), 3)

    def test_format_percent(self):
        self.assertEqual(format_percent(Decimal('0.10')), '10')
        self.assertEqual(format_percent(Decimal('0.125')), '12.5')

    def test_mask_sensitive_data(self):
        self.assertEqual(mask_sensitive_data('SB-Mid-server-abcd'), '**************abcd')
        self.assertEqual(mask_sensitive_data('abc'), '***')


class CheckoutErrorTests(SimpleTestCase):

    def test_http_status_per_kind(self):
        expected = {
            CheckoutErrorKind.UNAUTHORIZED: 401,
            CheckoutErrorKind.FORBIDDEN: 403,
            CheckoutErrorKind.INVALID_SIGNATURE: 403,
            CheckoutErrorKind.CART_EMPTY: 400,
            CheckoutErrorKind.ORDER_NOT_FOUND: 404,
            CheckoutErrorKind.COMMIT_FAILED: 500,
            CheckoutErrorKind.INTERNAL_ERROR: 500,
        }
        for kind, status in expected.items():
            with self.subTest(kind=kind):
                self.assertEqual(kind.http_status, status)

    def test_every_kind_has_a_status(self):
        for kind in CheckoutErrorKind:
            self.assertIsInstance(kind.http_status, int)

    def test_response_body(self):
        error = CheckoutError(CheckoutErrorKind.INSUFFICIENT_STOCK, 'Mug: only 3 left in stock', details=['a', 'b'])

        self.assertEqual(error.to_response_body(), {
            'success': False,
            'error': {'kind': 'insufficient_stock', 'message': 'Mug: only 3 left in stock', 'details': ['a', 'b']},
        })


class ResultTypeTests(SimpleTestCase):

    def test_chaining_stops_at_first_error(self):
        error = CheckoutError(CheckoutErrorKind.CART_EMPTY, 'Cart is empty')

        result = Ok(2).map(lambda x: x * 3).and_then(lambda _x: Err(error)).map(lambda x: x + 1)

        self.assertTrue(result.is_err())
        self.assertEqual(result.unwrap_err(), error)
        self.assertEqual(Ok(2).map(lambda x: x * 3).unwrap(), 6)
