import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q, F
from django.shortcuts import get_object_or_404
from .models import Category, Product, ProductVariant
from .serializers import CategorySerializer, ProductSerializer, ProductVariantSerializer
from .filters import ProductFilter
from invoicing.core.utils import create_audit_log, get_request_company, paginated_response
from invoicing.inventory.services import apply_stock_movement

logger = logging.getLogger(__name__)

TRACKED_PRODUCT_FIELDS = ['name', 'sku', 'selling_price', 'tax_rate', 'status', 'is_active']


def product_is_referenced(product):
    """True when any quotation, proforma or invoice line points at the product"""
    return (
        product.quotation_items.exists() or
        product.proforma_items.exists() or
        product.invoice_items.exists()
    )


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    company = get_request_company(request)

    if request.method == 'GET':
        categories = Category.objects.select_related('parent').filter(company=company)
        if request.query_params.get('is_active') in ('true', '1'):
            categories = categories.filter(is_active=True)
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)

    serializer = CategorySerializer(data=request.data, context={'company': company})
    if serializer.is_valid():
        category = serializer.save(company=company)
        create_audit_log(
            request=request,
            action='create',
            model_name='Category',
            object_id=category.id,
            object_reference=category.name,
            company=company,
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    company = get_request_company(request)
    category = get_object_or_404(Category, pk=pk, company=company)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)

    if request.method == 'DELETE':
        category_name = category.name
        category.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Category',
            object_id=pk,
            object_reference=category_name,
            company=company,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = CategorySerializer(
        category, data=request.data, partial=request.method == 'PATCH', context={'company': company}
    )
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all products or create a new product"""
    company = get_request_company(request)

    if request.method == 'GET':
        queryset = Product.objects.select_related('category', 'tax_configuration').prefetch_related('variants').filter(company=company)
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return paginated_response(request, filterset.qs.order_by('name', 'id'), ProductSerializer)

    serializer = ProductSerializer(data=request.data, context={'company': company})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    opening_stock = serializer.validated_data.pop('opening_stock', None)
    with transaction.atomic():
        product = serializer.save(company=company, created_by=request.user)
        if opening_stock:
            apply_stock_movement(
                product, opening_stock, 'in', user=request.user, reference='Opening stock'
            )
            product.refresh_from_db()

    logger.info(f"Product {product.sku} created for company {company.id}")
    create_audit_log(
        request=request,
        action='create',
        model_name='Product',
        object_id=product.id,
        object_reference=product.sku,
        changes={'name': product.name, 'selling_price': str(product.selling_price)},
        company=company,
    )
    return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    company = get_request_company(request)
    product = get_object_or_404(Product, pk=pk, company=company)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)

    if request.method == 'DELETE':
        if product_is_referenced(product):
            # Line items keep pointing at the product, so only deactivate it
            product.is_active = False
            product.status = 'inactive'
            product.save(update_fields=['is_active', 'status', 'updated_at'])
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=product.id,
                object_reference=product.sku,
                changes={'is_active': {'old': True, 'new': False}},
                company=company,
            )
            return Response({
                'message': 'Product is used on existing documents and has been deactivated instead of deleted',
                'product': ProductSerializer(product).data,
            })

        sku = product.sku
        product.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Product',
            object_id=pk,
            object_reference=sku,
            company=company,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProductSerializer(
        product, data=request.data, partial=request.method == 'PATCH', context={'company': company}
    )
    if serializer.is_valid():
        serializer.validated_data.pop('opening_stock', None)
        old_data = {field: getattr(product, field) for field in TRACKED_PRODUCT_FIELDS}
        serializer.save()
        changes = {
            field: {'old': str(old_data[field]), 'new': str(getattr(product, field))}
            for field in TRACKED_PRODUCT_FIELDS
            if old_data[field] != getattr(product, field)
        }
        if changes:
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=product.id,
                object_reference=product.sku,
                changes=changes,
                company=company,
            )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_low_stock(request):
    """Active, inventory-tracked products at or below their minimum stock"""
    company = get_request_company(request)
    products = Product.objects.select_related('category').filter(
        company=company,
        is_active=True,
        track_inventory=True,
        current_stock__lte=F('min_stock'),
    ).order_by('current_stock', 'name')
    serializer = ProductSerializer(products, many=True)
    return Response({'count': len(serializer.data), 'results': serializer.data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_search(request):
    """Quick lookup used by the document line editor"""
    company = get_request_company(request)
    term = request.query_params.get('q', '').strip()
    if len(term) < 2:
        return Response([])

    products = Product.objects.filter(company=company, is_active=True).filter(
        Q(name__icontains=term) | Q(sku__icontains=term)
    ).order_by('name')[:20]
    return Response([
        {
            'id': product.id,
            'name': product.name,
            'sku': product.sku,
            'unit': product.unit,
            'selling_price': str(product.selling_price),
            'taxable': product.taxable,
            'tax_rate': str(product.tax_rate) if product.tax_rate is not None else None,
            'current_stock': str(product.current_stock),
        }
        for product in products
    ])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_variants(request, pk):
    """List or add variants of a product"""
    company = get_request_company(request)
    product = get_object_or_404(Product, pk=pk, company=company)

    if request.method == 'GET':
        serializer = ProductVariantSerializer(product.variants.all(), many=True)
        return Response(serializer.data)

    serializer = ProductVariantSerializer(data=request.data)
    if serializer.is_valid():
        if ProductVariant.objects.filter(product=product, sku=serializer.validated_data['sku']).exists():
            return Response({'sku': ['A variant with this SKU already exists for the product']}, status=status.HTTP_400_BAD_REQUEST)
        serializer.save(product=product)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
