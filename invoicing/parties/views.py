import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404
from .models import Customer
from .serializers import CustomerSerializer
from invoicing.core.utils import create_audit_log, get_request_company, paginated_response

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List all customers or create a new customer"""
    company = get_request_company(request)

    if request.method == 'GET':
        queryset = Customer.objects.select_related('exemption_reason').filter(company=company)
        search = request.query_params.get('search', None)
        is_active = request.query_params.get('is_active', None)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(phone__icontains=search) |
                Q(kra_pin__icontains=search)
            )
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() in ('true', '1'))
        return paginated_response(request, queryset.order_by('name', 'id'), CustomerSerializer)

    serializer = CustomerSerializer(data=request.data, context={'company': company})
    if serializer.is_valid():
        customer = serializer.save(company=company, created_by=request.user)
        create_audit_log(
            request=request,
            action='create',
            model_name='Customer',
            object_id=customer.id,
            object_reference=customer.name,
            company=company,
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    company = get_request_company(request)
    customer = get_object_or_404(Customer, pk=pk, company=company)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)

    if request.method == 'DELETE':
        if customer.has_documents():
            customer.is_active = False
            customer.save(update_fields=['is_active', 'updated_at'])
            create_audit_log(
                request=request,
                action='update',
                model_name='Customer',
                object_id=customer.id,
                object_reference=customer.name,
                changes={'is_active': {'old': True, 'new': False}},
                company=company,
            )
            return Response({
                'message': 'Customer has documents and has been deactivated instead of deleted',
                'customer': CustomerSerializer(customer).data,
            })

        name = customer.name
        customer.delete()
        logger.info(f"Customer {name} deleted from company {company.id}")
        create_audit_log(
            request=request,
            action='delete',
            model_name='Customer',
            object_id=pk,
            object_reference=name,
            company=company,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = CustomerSerializer(
        customer, data=request.data, partial=request.method == 'PATCH', context={'company': company}
    )
    if serializer.is_valid():
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='Customer',
            object_id=customer.id,
            object_reference=customer.name,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
            company=company,
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_outstanding(request, pk):
    """Outstanding amount across the customer's non-cancelled invoices"""
    company = get_request_company(request)
    customer = get_object_or_404(Customer, pk=pk, company=company)

    outstanding = customer.invoices.filter(company=company).exclude(status='cancelled').aggregate(
        total=Sum('balance_due')
    )['total'] or Decimal('0.00')

    return Response({
        'customer': customer.id,
        'balance': str(outstanding),
        'current_balance': str(customer.current_balance),
    })
