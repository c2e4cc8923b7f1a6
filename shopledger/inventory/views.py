from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from shopledger.core.exceptions import ServiceError
from shopledger.core.utils import create_audit_log, error_response, not_found_response
from . import audits, services
from .serializers import (
    StockMovementSerializer, StockInSerializer,
    InventoryAuditSerializer, InventoryAuditDetailSerializer, InventoryAuditItemSerializer,
    AuditCreateSerializer, AuditItemUpdateSerializer,
)


# Stock movement views
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def stock_in(request):
    """Receive stock for a product, optionally as a credit purchase from a supplier"""
    serializer = StockInSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        movement = services.stock_in(user=request.user, **serializer.validated_data)
    except ServiceError as e:
        return error_response(e)

    supplier_id = serializer.validated_data['supplier_id']
    create_audit_log(
        action='stock_in',
        model_name='StockMovement',
        object_id=movement.id,
        object_name=movement.product_name,
        user=request.user,
        changes={
            'product_id': str(movement.product_id),
            'quantity': movement.quantity,
            'supplier_id': str(supplier_id) if supplier_id else None,
        },
    )
    return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_movement_list(request):
    """List stock movements, optionally filtered by product_id and movement_type"""
    product_id = request.query_params.get('product_id', None)
    movement_type = request.query_params.get('movement_type', None)
    movements = services.list_movements(product_id or None, movement_type).select_related('created_by')
    return Response(StockMovementSerializer(movements, many=True).data)


# Inventory audit views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def audit_list_create(request):
    """List audits (newest first, optional ?status=) or start a new audit"""
    if request.method == 'GET':
        queryset = audits.list_audits(request.query_params.get('status', None))
        serializer = InventoryAuditSerializer(queryset.select_related('created_by', 'approved_by'), many=True)
        return Response(serializer.data)

    serializer = AuditCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    audit = audits.create_audit(serializer.validated_data['notes'], user=request.user)
    create_audit_log(action='audit_create', model_name='InventoryAudit', object_id=audit.id,
                     object_reference=str(audit.id), user=request.user)
    return Response(InventoryAuditDetailSerializer(audit).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_detail(request, pk):
    audit = audits.get_audit(pk)
    if audit is None:
        return not_found_response('Inventory audit')
    return Response(InventoryAuditDetailSerializer(audit).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def audit_item_update(request, item_id):
    """Enter the counted quantity for an audit item (draft audits only)"""
    serializer = AuditItemUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        item = audits.update_item(item_id, serializer.validated_data['actual_quantity'])
    except ServiceError as e:
        return error_response(e)
    if item is None:
        return not_found_response('Inventory audit item')
    return Response(InventoryAuditItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def audit_approve(request, pk):
    """Approve an audit and apply its differences to stock"""
    try:
        audit = audits.approve_audit(pk, user=request.user)
    except ServiceError as e:
        return error_response(e)
    if audit is None:
        return not_found_response('Inventory audit')

    differences = audit.items.exclude(difference=0)
    create_audit_log(
        action='audit_approve',
        model_name='InventoryAudit',
        object_id=audit.id,
        object_reference=str(audit.id),
        user=request.user,
        changes={str(item.product_id): item.difference for item in differences},
    )
    return Response(InventoryAuditDetailSerializer(audit).data)
