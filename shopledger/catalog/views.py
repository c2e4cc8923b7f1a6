from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from shopledger.core.exceptions import ServiceError
from shopledger.core.utils import create_audit_log, error_response, not_found_response
from shopledger.inventory.serializers import StockAdjustSerializer
from shopledger.inventory.services import adjust_stock
from . import services
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer, ProductCreateSerializer, ProductUpdateSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products (search / low_stock / out_of_stock filters) or create a product"""
    if request.method == 'GET':
        product_filter = ProductFilter(request.query_params, queryset=Product.objects.all())
        serializer = ProductSerializer(product_filter.qs, many=True)
        return Response(serializer.data)

    serializer = ProductCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        product = services.create_product(**serializer.validated_data)
    except ServiceError as e:
        return error_response(e)

    create_audit_log(
        action='create',
        model_name='Product',
        object_id=product.id,
        object_name=product.name,
        user=request.user,
        changes={'quantity': product.quantity, 'sale_price': str(product.sale_price)},
    )
    return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    if request.method == 'GET':
        product = services.get_product(pk)
        if product is None:
            return not_found_response('Product')
        return Response(ProductSerializer(product).data)

    if request.method == 'PATCH':
        serializer = ProductUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            product = services.update_product(pk, **serializer.validated_data)
        except ServiceError as e:
            return error_response(e)
        if product is None:
            return not_found_response('Product')
        create_audit_log(
            action='update',
            model_name='Product',
            object_id=product.id,
            object_name=product.name,
            user=request.user,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
        )
        return Response(ProductSerializer(product).data)

    # DELETE
    if not services.delete_product(pk):
        return not_found_response('Product')
    create_audit_log(action='delete', model_name='Product', object_id=pk, user=request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_low_stock(request):
    """Products at or below their minimum quantity"""
    serializer = ProductSerializer(services.list_low_stock(), many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_adjust_quantity(request, pk):
    """Manual stock correction by a signed delta; recorded as an adjustment movement"""
    serializer = StockAdjustSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        product = adjust_stock(pk, user=request.user, **serializer.validated_data)
    except ServiceError as e:
        return error_response(e)
    if product is None:
        return not_found_response('Product')

    create_audit_log(
        action='stock_adjust',
        model_name='Product',
        object_id=product.id,
        object_name=product.name,
        user=request.user,
        changes={'delta': serializer.validated_data['delta'], 'quantity': product.quantity,
                 'reason': serializer.validated_data['reason']},
    )
    return Response(ProductSerializer(product).data)
