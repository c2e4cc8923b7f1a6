"""
Test suite for the POS module
Tests: checkout (cash and credit), invoice numbering, totals, stock depletion, oversell policy and API endpoints
"""
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from shopledger.core.exceptions import ImmutableRecord, InsufficientStock, ValidationFailed
from shopledger.core.models import AuditLog
from shopledger.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopledger.inventory import services as inventory_services
from shopledger.inventory.models import StockMovement
from shopledger.parties.models import CustomerTransaction
from shopledger.parties.services import customer_ledger
from shopledger.pos import services
from shopledger.pos.models import Invoice, InvoiceItem
from shopledger.pos.services import CartLine

MISSING_ID = '00000000-0000-0000-0000-000000000000'


class CheckoutTests(TestCase):
    """Test the sales engine"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(
            quantity=10, minimum_quantity=2, purchase_price=Decimal('12.00'), sale_price=Decimal('20.00')
        )
        self.customer = TestDataFactory.create_customer()

    def test_restock_then_cash_sale(self):
        inventory_services.stock_in(self.product.id, 5, 'restock')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 15)

        invoice = services.checkout([CartLine(self.product.id, 3, Decimal('20.00'))], 'cash', user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 12)
        self.assertEqual(invoice.total_amount, Decimal('60.00'))
        self.assertEqual(invoice.total_profit, Decimal('24.00'))
        self.assertEqual(invoice.payment_type, 'cash')
        self.assertEqual(CustomerTransaction.objects.count(), 0)

    def test_credit_sale_then_payment(self):
        invoice = services.checkout([CartLine(self.product.id, 5)], 'credit', customer_id=self.customer.id)
        self.assertEqual(invoice.total_amount, Decimal('100.00'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('100.00'))

        sale = CustomerTransaction.objects.get(customer_id=self.customer.id)
        self.assertEqual(sale.transaction_type, 'sale')
        self.assertEqual(sale.amount, Decimal('100.00'))
        self.assertEqual(sale.invoice_id, invoice.id)

        customer_ledger.add_payment(self.customer.id, '40.00', 'cash collection')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('60.00'))
        amounts = sorted(CustomerTransaction.objects.values_list('amount', flat=True))
        self.assertEqual(amounts, [Decimal('-40.00'), Decimal('100.00')])

    def test_totals_across_lines(self):
        other = TestDataFactory.create_product(purchase_price=Decimal('1.00'), sale_price=Decimal('2.50'), quantity=100)
        invoice = services.checkout(
            [CartLine(self.product.id, 2), CartLine(other.id, 4, Decimal('3.00'))], 'cash'
        )
        self.assertEqual(invoice.total_amount, Decimal('52.00'))
        self.assertEqual(invoice.total_profit, Decimal('16.00') + Decimal('8.00'))
        items = list(invoice.items.all())
        self.assertEqual(len(items), 2)
        self.assertEqual(items[1].unit_price, Decimal('3.00'))
        self.assertEqual(items[1].purchase_price, Decimal('1.00'))
        self.assertEqual(sum(item.profit for item in items), invoice.total_profit)

    def test_price_captured_at_sale_time(self):
        invoice = services.checkout([CartLine(self.product.id, 1)], 'cash')
        self.product.sale_price = Decimal('99.00')
        self.product.save()
        item = invoice.items.get()
        self.assertEqual(item.unit_price, Decimal('20.00'))
        self.assertEqual(item.product_name, self.product.name)

    def test_invoice_numbers_increase(self):
        numbers = [services.checkout([CartLine(self.product.id, 1)], 'cash').invoice_number for _ in range(3)]
        self.assertEqual(numbers, sorted(set(numbers)))
        self.assertEqual(numbers[2] - numbers[0], 2)

    def test_failed_checkout_leaves_no_trace(self):
        with self.assertRaises(ValidationFailed):
            services.checkout([CartLine(self.product.id, 1), CartLine(MISSING_ID, 1)], 'cash')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)
        self.assertEqual(Invoice.objects.count(), 0)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_checkout_records_out_movements(self):
        invoice = services.checkout([CartLine(self.product.id, 3)], 'cash')
        movement = StockMovement.objects.get()
        self.assertEqual(movement.movement_type, 'out')
        self.assertEqual(movement.quantity, 3)
        self.assertIn(str(invoice.invoice_number), movement.reason)

    def test_failed_credit_charge_rolls_back(self):
        with patch.object(customer_ledger, 'add_charge', return_value=None):
            with self.assertRaises(ValidationFailed):
                services.checkout([CartLine(self.product.id, 2)], 'credit', customer_id=self.customer.id)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)
        self.assertEqual(Invoice.objects.count(), 0)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_oversell_allowed_by_default(self):
        services.checkout([CartLine(self.product.id, 15)], 'cash')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, -5)

    @override_settings(SHOPLEDGER_ALLOW_NEGATIVE_STOCK=False)
    def test_oversell_rejected_when_disabled(self):
        with self.assertRaises(InsufficientStock):
            services.checkout([CartLine(self.product.id, 6), CartLine(self.product.id, 5)], 'cash')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)
        services.checkout([CartLine(self.product.id, 10)], 'cash')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 0)

    def test_validation_failures(self):
        cases = [
            ([], 'cash', None),
            ([CartLine(self.product.id, 0)], 'cash', None),
            ([CartLine(self.product.id, -1)], 'cash', None),
            ([CartLine(self.product.id, 1, Decimal('-1.00'))], 'cash', None),
            ([CartLine(self.product.id, 1)], 'card', None),
            ([CartLine(self.product.id, 1)], 'credit', None),
            ([CartLine(self.product.id, 1)], 'credit', MISSING_ID),
        ]
        for lines, payment_type, customer_id in cases:
            with self.assertRaises(ValidationFailed):
                services.checkout(lines, payment_type, customer_id=customer_id)
        self.assertEqual(Invoice.objects.count(), 0)

    def test_cash_sale_ignores_customer(self):
        invoice = services.checkout([CartLine(self.product.id, 1)], 'cash', customer_id=self.customer.id)
        self.assertIsNone(invoice.customer_id)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('0.00'))

    def test_invoice_is_immutable(self):
        invoice = services.checkout([CartLine(self.product.id, 1)], 'cash')
        invoice.total_amount = Decimal('0.00')
        with self.assertRaises(ImmutableRecord):
            invoice.save()
        with self.assertRaises(ImmutableRecord):
            invoice.delete()
        with self.assertRaises(ImmutableRecord):
            InvoiceItem.objects.get(invoice=invoice).save()

    def test_invoices_for_day_and_month(self):
        now = timezone.now()
        services.checkout([CartLine(self.product.id, 1)], 'cash', invoice_date=now)
        services.checkout([CartLine(self.product.id, 1)], 'cash', invoice_date=now - timedelta(days=40))
        today = timezone.localdate()
        self.assertEqual(services.invoices_for_day(today).count(), 1)
        self.assertEqual(services.invoices_for_month(today.year, today.month).count(), 1)

    @override_settings(TIME_ZONE='Asia/Kolkata')
    def test_day_boundaries_follow_time_zone(self):
        tz = timezone.get_current_timezone()
        late = timezone.make_aware(datetime(2024, 3, 10, 23, 30), tz)
        services.checkout([CartLine(self.product.id, 1)], 'cash', invoice_date=late)
        self.assertEqual(services.invoices_for_day(late.date()).count(), 1)
        self.assertEqual(services.invoices_for_day(late.date() + timedelta(days=1)).count(), 0)


class CheckoutAPITests(TestCase):
    """Test checkout and invoice endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(quantity=10, sale_price=Decimal('20.00'))
        self.customer = TestDataFactory.create_customer()

    def test_cash_checkout(self):
        data = {'items': [{'product_id': str(self.product.id), 'quantity': 3, 'unit_price': '20.00'}],
                'payment_type': 'cash'}
        response = self.client.post('/api/v1/checkout/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('60.00'))
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['created_by_username'], self.user.username)
        log = AuditLog.objects.get(action='invoice_checkout')
        self.assertEqual(log.object_id, response.data['id'])
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.changes['total_amount'], '60.00')

    def test_service_checkout_writes_no_audit_log(self):
        services.checkout([CartLine(self.product.id, 1)], 'cash', user=self.user)
        self.assertFalse(AuditLog.objects.filter(action='invoice_checkout').exists())

    def test_credit_checkout_requires_customer(self):
        data = {'items': [{'product_id': str(self.product.id), 'quantity': 1}], 'payment_type': 'credit'}
        response = self.client.post('/api/v1/checkout/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_failed')

    def test_credit_checkout(self):
        data = {'items': [{'product_id': str(self.product.id), 'quantity': 2}], 'payment_type': 'credit',
                'customer_id': str(self.customer.id)}
        response = self.client.post('/api/v1/checkout/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['customer_name'], self.customer.name)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('40.00'))

    def test_empty_cart(self):
        response = self.client.post('/api/v1/checkout/', {'items': [], 'payment_type': 'cash'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(SHOPLEDGER_ALLOW_NEGATIVE_STOCK=False)
    def test_insufficient_stock_conflict(self):
        data = {'items': [{'product_id': str(self.product.id), 'quantity': 11}], 'payment_type': 'cash'}
        response = self.client.post('/api/v1/checkout/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'insufficient_stock')

    def test_invoice_list_and_detail(self):
        invoice = services.checkout([CartLine(self.product.id, 1)], 'cash')
        services.checkout([CartLine(self.product.id, 1)], 'credit', customer_id=self.customer.id)
        response = self.client.get('/api/v1/invoices/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/invoices/?payment_type=cash')
        self.assertEqual([row['id'] for row in response.data], [str(invoice.id)])
        response = self.client.get(f'/api/v1/invoices/{invoice.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_number'], invoice.invoice_number)
        response = self.client.get(f'/api/v1/invoices/{MISSING_ID}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
