import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from .models import StockMovement
from .serializers import StockMovementSerializer, StockUpdateSerializer
from .services import apply_stock_movement
from invoicing.catalog.models import Product
from invoicing.catalog.serializers import ProductSerializer
from invoicing.core.utils import create_audit_log, get_request_company, paginated_response

logger = logging.getLogger(__name__)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def product_stock_update(request, pk):
    """Apply an in / out / adjustment movement to a product's stock"""
    company = get_request_company(request)
    product = get_object_or_404(Product, pk=pk, company=company)

    serializer = StockUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        movement = apply_stock_movement(
            product,
            data['quantity'],
            data['movement_type'],
            user=request.user,
            reference=data.get('reference', ''),
            notes=data.get('notes', ''),
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='stock_adjust',
        model_name='Product',
        object_id=product.id,
        object_reference=product.sku,
        changes={
            'movement_type': movement.movement_type,
            'quantity': str(movement.quantity),
            'previous_stock': str(movement.previous_stock),
            'new_stock': str(movement.new_stock),
        },
        company=company,
    )
    product.refresh_from_db()
    return Response({
        'message': 'Stock updated successfully',
        'movement': StockMovementSerializer(movement).data,
        'product': ProductSerializer(product).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_stock_movements(request, pk):
    """Stock movement history of one product"""
    company = get_request_company(request)
    product = get_object_or_404(Product, pk=pk, company=company)
    movements = StockMovement.objects.select_related('product', 'created_by').filter(product=product)
    return paginated_response(request, movements.order_by('-created_at', '-id'), StockMovementSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_movement_list(request):
    """All stock movements of the company, newest first"""
    company = get_request_company(request)
    movements = StockMovement.objects.select_related('product', 'created_by').filter(product__company=company)

    movement_type = request.query_params.get('movement_type', None)
    product_id = request.query_params.get('product', None)
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)

    if movement_type:
        movements = movements.filter(movement_type=movement_type)
    if product_id:
        movements = movements.filter(product_id=product_id)
    if date_from:
        movements = movements.filter(created_at__date__gte=date_from)
    if date_to:
        movements = movements.filter(created_at__date__lte=date_to)

    return paginated_response(request, movements.order_by('-created_at', '-id'), StockMovementSerializer)
