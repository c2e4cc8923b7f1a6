from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from shopledger.core.exceptions import ServiceError
from shopledger.core.utils import create_audit_log, error_response, not_found_response
from .serializers import (
    CustomerSerializer, SupplierSerializer, PartyWriteSerializer, PartyUpdateSerializer,
    PostingSerializer, CustomerTransactionSerializer, SupplierTransactionSerializer,
)
from .services import customer_ledger, supplier_ledger


def _party_list_create(request, ledger, serializer_class):
    if request.method == 'GET':
        parties = ledger.list(search=request.query_params.get('search', None))
        return Response(serializer_class(parties, many=True).data)

    serializer = PartyWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        party = ledger.create(**serializer.validated_data)
    except ServiceError as e:
        return error_response(e)
    create_audit_log(action='create', model_name=ledger.label, object_id=party.id,
                     object_name=party.name, user=request.user)
    return Response(serializer_class(party).data, status=status.HTTP_201_CREATED)


def _party_detail(request, pk, ledger, serializer_class):
    if request.method == 'GET':
        party = ledger.get(pk)
        if party is None:
            return not_found_response(ledger.label)
        return Response(serializer_class(party).data)

    if request.method == 'PATCH':
        serializer = PartyUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            party = ledger.update(pk, **serializer.validated_data)
        except ServiceError as e:
            return error_response(e)
        if party is None:
            return not_found_response(ledger.label)
        create_audit_log(action='update', model_name=ledger.label, object_id=party.id,
                         object_name=party.name, user=request.user,
                         changes={key: str(value) for key, value in serializer.validated_data.items()})
        return Response(serializer_class(party).data)

    # DELETE
    try:
        deleted = ledger.delete(pk)
    except ServiceError as e:
        return error_response(e)
    if not deleted:
        return not_found_response(ledger.label)
    create_audit_log(action='delete', model_name=ledger.label, object_id=pk, user=request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


def _party_posting(request, pk, ledger, post, action, transaction_serializer_class):
    """Run one of the ledger postings (payment, charge, adjustment) for a party"""
    serializer = PostingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        entry = post(pk, data['amount'], data['description'], date=data['date'], user=request.user)
    except ServiceError as e:
        return error_response(e)
    if entry is None:
        return not_found_response(ledger.label)

    create_audit_log(
        action=action,
        model_name=ledger.label,
        object_id=pk,
        user=request.user,
        changes={'transaction_type': entry.transaction_type, 'amount': str(entry.amount)},
    )
    return Response(transaction_serializer_class(entry).data, status=status.HTTP_201_CREATED)


def _party_transactions(request, pk, ledger, transaction_serializer_class):
    if ledger.get(pk) is None:
        return not_found_response(ledger.label)
    entries = ledger.list_transactions(pk).select_related('created_by')
    return Response(transaction_serializer_class(entries, many=True).data)


def _transaction_list(request, ledger, transaction_serializer_class):
    """All ledger lines, optionally filtered by party id and transaction type"""
    party_id = request.query_params.get(ledger.party_field, None)
    transaction_type = request.query_params.get('transaction_type', None)
    entries = ledger.list_transactions(party_id or None, transaction_type).select_related('created_by')
    return Response(transaction_serializer_class(entries, many=True).data)


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List customers (optional ?search=) or create a customer"""
    return _party_list_create(request, customer_ledger, CustomerSerializer)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer; deleting with a balance gives 409"""
    return _party_detail(request, pk, customer_ledger, CustomerSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_payment(request, pk):
    """Record a payment received from a customer"""
    return _party_posting(request, pk, customer_ledger, customer_ledger.add_payment,
                          'payment_add', CustomerTransactionSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_adjustment(request, pk):
    return _party_posting(request, pk, customer_ledger, customer_ledger.add_adjustment,
                          'ledger_adjust', CustomerTransactionSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_transactions(request, pk):
    return _party_transactions(request, pk, customer_ledger, CustomerTransactionSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_transaction_list(request):
    return _transaction_list(request, customer_ledger, CustomerTransactionSerializer)


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List suppliers (optional ?search=) or create a supplier"""
    return _party_list_create(request, supplier_ledger, SupplierSerializer)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    return _party_detail(request, pk, supplier_ledger, SupplierSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_payment(request, pk):
    """Record a payment made to a supplier"""
    return _party_posting(request, pk, supplier_ledger, supplier_ledger.add_payment,
                          'payment_add', SupplierTransactionSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_purchase(request, pk):
    """Record a credit purchase not tied to a stock-in"""
    return _party_posting(request, pk, supplier_ledger, supplier_ledger.add_charge,
                          'ledger_charge', SupplierTransactionSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_adjustment(request, pk):
    return _party_posting(request, pk, supplier_ledger, supplier_ledger.add_adjustment,
                          'ledger_adjust', SupplierTransactionSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_transactions(request, pk):
    return _party_transactions(request, pk, supplier_ledger, SupplierTransactionSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_transaction_list(request):
    return _transaction_list(request, supplier_ledger, SupplierTransactionSerializer)
