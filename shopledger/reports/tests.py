"""
Test suite for Reports module
Tests: dashboard stats, daily/monthly sales, low stock and audit difference reports
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from shopledger.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopledger.inventory import audits
from shopledger.parties.services import supplier_ledger
from shopledger.pos import services as pos_services
from shopledger.pos.services import CartLine
from shopledger.reports import services


class ReportServiceTests(TestCase):
    """Test report computations"""

    def setUp(self):
        self.product = TestDataFactory.create_product(
            quantity=10, minimum_quantity=2, purchase_price=Decimal('5.00'), sale_price=Decimal('8.00')
        )
        self.low = TestDataFactory.create_product(quantity=1, minimum_quantity=4)
        self.customer = TestDataFactory.create_customer()
        self.supplier = TestDataFactory.create_supplier()

    def test_dashboard_stats(self):
        pos_services.checkout([CartLine(self.product.id, 2)], 'cash')
        pos_services.checkout([CartLine(self.product.id, 1)], 'credit', customer_id=self.customer.id)
        supplier_ledger.add_charge(self.supplier.id, '30.00')

        stats = services.dashboard_stats()
        self.assertEqual(stats['total_products'], 2)
        self.assertEqual(stats['low_stock_products'], 1)
        self.assertEqual(stats['total_customers'], 1)
        self.assertEqual(stats['total_suppliers'], 1)
        self.assertEqual(stats['today_sales'], Decimal('24.00'))
        self.assertEqual(stats['today_profit'], Decimal('9.00'))
        self.assertEqual(stats['today_invoices'], 2)
        self.assertEqual(stats['month_sales'], Decimal('24.00'))
        self.assertEqual(stats['total_customer_debt'], Decimal('8.00'))
        self.assertEqual(stats['total_supplier_debt'], Decimal('30.00'))

    def test_dashboard_reflects_changes_immediately(self):
        self.assertEqual(services.dashboard_stats()['today_sales'], Decimal('0.00'))
        pos_services.checkout([CartLine(self.product.id, 1)], 'cash')
        self.assertEqual(services.dashboard_stats()['today_sales'], Decimal('8.00'))

    def test_daily_sales_split(self):
        pos_services.checkout([CartLine(self.product.id, 1)], 'cash')
        pos_services.checkout([CartLine(self.product.id, 2)], 'credit', customer_id=self.customer.id)
        pos_services.checkout(
            [CartLine(self.product.id, 5)], 'cash', invoice_date=timezone.now() - timedelta(days=3)
        )
        report = services.daily_sales(timezone.localdate())
        self.assertEqual(report['invoice_count'], 2)
        self.assertEqual(report['total_amount'], Decimal('24.00'))
        self.assertEqual(report['cash_amount'], Decimal('8.00'))
        self.assertEqual(report['credit_amount'], Decimal('16.00'))

    def test_monthly_sales(self):
        today = timezone.localdate()
        pos_services.checkout([CartLine(self.product.id, 1)], 'cash')
        pos_services.checkout(
            [CartLine(self.product.id, 1)], 'cash', invoice_date=timezone.now() - timedelta(days=62)
        )
        report = services.monthly_sales(today.year, today.month)
        self.assertEqual(report['invoice_count'], 1)
        self.assertEqual(report['total_profit'], Decimal('3.00'))

    def test_low_stock_report(self):
        rows = services.low_stock_report()
        self.assertEqual([p.id for p in rows], [self.low.id])
        self.assertEqual(rows[0].shortfall, 3)

    def test_audit_difference_report(self):
        audit = audits.create_audit()
        items = {item.product_id: item for item in audits.audit_items(audit.id)}
        audits.update_item(items[self.product.id].id, 7)
        audits.update_item(items[self.low.id].id, 3)

        report = services.audit_difference_report(audit.id)
        self.assertEqual(len(report['items']), 2)
        self.assertEqual(report['total_shortage'], 3)
        self.assertEqual(report['total_surplus'], 2)
        self.assertIsNone(services.audit_difference_report('00000000-0000-0000-0000-000000000000'))

    def test_approved_audits_report(self):
        draft = audits.create_audit()
        approved = audits.create_audit()
        audits.approve_audit(approved.id)
        reports = services.approved_audits_report()
        self.assertEqual([r['audit'].id for r in reports], [approved.id])
        self.assertNotIn(draft.id, [r['audit'].id for r in reports])


class ReportsAPITests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(quantity=0, minimum_quantity=1)

    def test_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 1)
        self.assertEqual(response.data['low_stock_products'], 1)

    def test_daily_sales(self):
        pos_services.checkout([CartLine(self.product.id, 1)], 'cash')
        response = self.client.get('/api/v1/reports/daily-sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_count'], 1)
        self.assertEqual(len(response.data['invoices']), 1)

    def test_daily_sales_bad_date(self):
        response = self.client.get('/api/v1/reports/daily-sales/?date=2024-13-45')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_monthly_sales_with_month(self):
        response = self.client.get('/api/v1/reports/monthly-sales/?month=2024-01')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['month'], '2024-01')
        self.assertEqual(response.data['invoice_count'], 0)

    def test_low_stock(self):
        response = self.client.get('/api/v1/reports/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['shortfall'], 1)

    def test_audit_reports(self):
        audit = audits.create_audit()
        response = self.client.get(f'/api/v1/reports/audits/{audit.id}/differences/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])
        response = self.client.get('/api/v1/reports/audits/')
        self.assertEqual(response.data, [])
        response = self.client.get('/api/v1/reports/audits/00000000-0000-0000-0000-000000000000/differences/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
