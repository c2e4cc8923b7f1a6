"""
Read-only reports over products, parties, invoices and audits.

Everything is computed from the database on each call; nothing is cached.
"""
from decimal import Decimal

from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from shopledger.catalog import services as catalog_services
from shopledger.catalog.models import Product
from shopledger.inventory import audits
from shopledger.inventory.models import AuditStatus
from shopledger.parties.services import customer_ledger, supplier_ledger
from shopledger.pos import services as pos_services
from shopledger.pos.models import PaymentType

ZERO = Decimal('0.00')


def _sales_totals(invoices):
    totals = invoices.aggregate(
        count=Count('id'),
        amount=Sum('total_amount'),
        profit=Sum('total_profit'),
        cash=Sum('total_amount', filter=Q(payment_type=PaymentType.CASH)),
        credit=Sum('total_amount', filter=Q(payment_type=PaymentType.CREDIT)),
    )
    return {
        'invoice_count': totals['count'],
        'total_amount': totals['amount'] or ZERO,
        'total_profit': totals['profit'] or ZERO,
        'cash_amount': totals['cash'] or ZERO,
        'credit_amount': totals['credit'] or ZERO,
    }


def dashboard_stats(today=None):
    today = today or timezone.localdate()
    day = _sales_totals(pos_services.invoices_for_day(today))
    month = _sales_totals(pos_services.invoices_for_month(today.year, today.month))
    stock = catalog_services.stock_value()
    return {
        'total_products': Product.objects.count(),
        'low_stock_products': catalog_services.list_low_stock().count(),
        'total_customers': customer_ledger.party_model.objects.count(),
        'total_suppliers': supplier_ledger.party_model.objects.count(),
        'today_sales': day['total_amount'],
        'today_profit': day['total_profit'],
        'today_invoices': day['invoice_count'],
        'month_sales': month['total_amount'],
        'month_profit': month['total_profit'],
        'month_invoices': month['invoice_count'],
        'total_customer_debt': customer_ledger.total_balance(),
        'total_supplier_debt': supplier_ledger.total_balance(),
        'stock_purchase_value': stock['purchase_value'],
        'stock_sale_value': stock['sale_value'],
    }


def daily_sales(day):
    invoices = pos_services.invoices_for_day(day)
    return {'date': day, **_sales_totals(invoices), 'invoices': invoices}


def monthly_sales(year, month):
    invoices = pos_services.invoices_for_month(year, month)
    return {'year': year, 'month': month, **_sales_totals(invoices), 'invoices': invoices}


def low_stock_report():
    """Low-stock products with the shortfall against their minimum"""
    products = catalog_services.list_low_stock().annotate(shortfall=F('minimum_quantity') - F('quantity'))
    return list(products)


def audit_difference_report(audit_id):
    audit = audits.get_audit(audit_id)
    if audit is None:
        return None
    items = list(audits.audit_items(audit.id).exclude(difference=0))
    return {
        'audit': audit,
        'items': items,
        'total_shortage': sum(-item.difference for item in items if item.difference < 0),
        'total_surplus': sum(item.difference for item in items if item.difference > 0),
    }


def approved_audits_report():
    return [
        audit_difference_report(audit.id)
        for audit in audits.list_audits(AuditStatus.APPROVED)
    ]
