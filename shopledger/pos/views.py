from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from shopledger.core.exceptions import ServiceError
from shopledger.core.utils import create_audit_log, error_response, not_found_response
from . import services
from .serializers import InvoiceSerializer, CheckoutSerializer


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def checkout(request):
    """Check out a cart as a cash or credit invoice"""
    serializer = CheckoutSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    lines = [services.CartLine(**line) for line in data['items']]
    try:
        invoice = services.checkout(
            lines,
            data['payment_type'],
            customer_id=data['customer_id'],
            user=request.user,
            invoice_date=data['invoice_date'],
        )
    except ServiceError as e:
        return error_response(e)

    create_audit_log(
        action='invoice_checkout',
        model_name='Invoice',
        object_id=invoice.id,
        object_name=f"Invoice #{invoice.invoice_number}",
        object_reference=str(invoice.invoice_number),
        user=request.user,
        changes={
            'payment_type': invoice.payment_type,
            'customer_id': str(invoice.customer_id) if invoice.customer_id else None,
            'total_amount': str(invoice.total_amount),
            'items': [
                {'product_id': str(line.product_id), 'quantity': line.quantity, 'unit_price': str(line.unit_price)}
                for line in invoice.items.all()
            ],
        },
    )
    return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_list(request):
    """List invoices, newest first, optionally filtered by payment_type and customer_id"""
    queryset = services.list_invoices(
        payment_type=request.query_params.get('payment_type', None),
        customer_id=request.query_params.get('customer_id', None) or None,
    )
    serializer = InvoiceSerializer(queryset.select_related('created_by').prefetch_related('items'), many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    invoice = services.get_invoice(pk)
    if invoice is None:
        return not_found_response('Invoice')
    return Response(InvoiceSerializer(invoice).data)
