from datetime import datetime

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.utils import timezone

from shopledger.catalog.serializers import ProductSerializer
from shopledger.core.utils import not_found_response
from shopledger.inventory.serializers import InventoryAuditSerializer, InventoryAuditItemSerializer
from shopledger.pos.serializers import InvoiceSerializer
from . import services

MONEY_FIELDS = ('total_amount', 'total_profit', 'cash_amount', 'credit_amount')


def _bad_request(message):
    return Response({'error': 'validation_failed', 'message': message}, status=status.HTTP_400_BAD_REQUEST)


def _sales_payload(report):
    payload = {key: float(report[key]) for key in MONEY_FIELDS}
    payload['invoice_count'] = report['invoice_count']
    invoices = report['invoices'].select_related('created_by').prefetch_related('items')
    payload['invoices'] = InvoiceSerializer(invoices, many=True).data
    return payload


def _audit_payload(report):
    return {
        'audit': InventoryAuditSerializer(report['audit']).data,
        'items': InventoryAuditItemSerializer(report['items'], many=True).data,
        'total_shortage': report['total_shortage'],
        'total_surplus': report['total_surplus'],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Dashboard counters, today's and this month's sales, and outstanding balances"""
    stats = services.dashboard_stats()
    return Response({
        key: float(value) if not isinstance(value, int) else value
        for key, value in stats.items()
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_sales(request):
    """Sales for one day (?date=YYYY-MM-DD, default today)"""
    value = request.query_params.get('date', None)
    try:
        day = datetime.strptime(value, '%Y-%m-%d').date() if value else timezone.localdate()
    except ValueError:
        return _bad_request('date must be in YYYY-MM-DD format')
    report = services.daily_sales(day)
    return Response({'date': day.isoformat(), **_sales_payload(report)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def monthly_sales(request):
    """Sales for one month (?month=YYYY-MM, default current month)"""
    value = request.query_params.get('month', None)
    try:
        first = datetime.strptime(value, '%Y-%m').date() if value else timezone.localdate().replace(day=1)
    except ValueError:
        return _bad_request('month must be in YYYY-MM format')
    report = services.monthly_sales(first.year, first.month)
    return Response({'month': first.strftime('%Y-%m'), **_sales_payload(report)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock(request):
    products = services.low_stock_report()
    data = ProductSerializer(products, many=True).data
    for row, product in zip(data, products):
        row['shortfall'] = product.shortfall
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def approved_audits(request):
    """Approved audits with their non-zero differences"""
    return Response([_audit_payload(report) for report in services.approved_audits_report()])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_differences(request, pk):
    report = services.audit_difference_report(pk)
    if report is None:
        return not_found_response('Inventory audit')
    return Response(_audit_payload(report))
