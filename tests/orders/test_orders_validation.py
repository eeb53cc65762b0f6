"""
🔍 Cart eligibility tests
All line-level problems are reported together, not just the first one.
"""

import uuid
from decimal import Decimal

from django.test import SimpleTestCase

from apps.cart.services import CartLine
from apps.common.errors import CheckoutErrorKind
from apps.orders.services import CheckoutValidationService


def make_line(name: str, quantity: int, stock: int, is_active: bool = True, product_id=None) -> CartLine:
    return CartLine(
        cart_item_id=uuid.uuid4(),
        product_id=product_id or uuid.uuid4(),
        variant_id=None,
        brand='',
        product_name=name,
        price=Decimal('10.00'),
        sale_price=None,
        stock_quantity=stock,
        is_active=is_active,
        quantity=quantity,
    )


class CheckoutValidationServiceTests(SimpleTestCase):

    def test_all_lines_eligible(self):
        report = CheckoutValidationService.validate_lines([make_line('Mug', 2, 5), make_line('Tote', 1, 1)])

        self.assertTrue(report.is_valid)
        self.assertEqual(report.messages, [])
        self.assertEqual(len(report.eligible_lines), 2)

    def test_insufficient_stock_message(self):
        report = CheckoutValidationService.validate_lines([make_line('Mug', 10, 3)])

        self.assertFalse(report.is_valid)
        self.assertEqual(report.messages, ['Mug: only 3 left in stock'])
        self.assertEqual(report.issues[0].kind, CheckoutErrorKind.INSUFFICIENT_STOCK)

    def test_inactive_product_reported_without_stock_check(self):
        report = CheckoutValidationService.validate_lines([make_line('Lamp', 10, 0, is_active=False)])

        self.assertEqual(report.messages, ['Lamp is no longer available'])
        self.assertEqual(report.issues[0].kind, CheckoutErrorKind.PRODUCT_UNAVAILABLE)

    def test_every_problem_is_collected(self):
        ok_line = make_line('Tote', 1, 5)
        report = CheckoutValidationService.validate_lines(
            [make_line('Lamp', 1, 5, is_active=False), ok_line, make_line('Mug', 10, 3)]
        )

        self.assertEqual(report.messages, ['Lamp is no longer available', 'Mug: only 3 left in stock'])
        self.assertEqual(report.eligible_lines, (ok_line,))

        error = report.to_error()
        self.assertEqual(error.kind, CheckoutErrorKind.PRODUCT_UNAVAILABLE)
        self.assertEqual(error.message, 'Lamp is no longer available')
        self.assertEqual(error.details, report.messages)

    def test_stock_is_checked_against_quantity_summed_per_product(self):
        product_id = uuid.uuid4()
        black = make_line('Tote', 3, 5, product_id=product_id)
        white = make_line('Tote', 3, 5, product_id=product_id)

        report = CheckoutValidationService.validate_lines([black, white, make_line('Mug', 1, 5)])

        self.assertFalse(report.is_valid)
        self.assertEqual(report.messages, ['Tote: only 5 left in stock'])
        self.assertEqual(report.issues[0].product_id, product_id)
        self.assertEqual([line.product_name for line in report.eligible_lines], ['Mug'])

    def test_lines_of_one_product_within_stock_stay_eligible(self):
        product_id = uuid.uuid4()
        lines = [make_line('Tote', 2, 5, product_id=product_id), make_line('Tote', 3, 5, product_id=product_id)]

        report = CheckoutValidationService.validate_lines(lines)

        self.assertTrue(report.is_valid)
        self.assertEqual(len(report.eligible_lines), 2)
