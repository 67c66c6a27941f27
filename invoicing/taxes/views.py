import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction, IntegrityError
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from .models import TaxConfiguration, TaxExemptionReason
from .serializers import TaxConfigurationSerializer, TaxExemptionReasonSerializer
from .services import set_default_tax_configuration, tax_configuration_in_use, get_applicable_tax_rate
from invoicing.core.utils import create_audit_log, get_request_company

logger = logging.getLogger(__name__)

IN_USE_MESSAGE = 'Cannot delete tax configuration that is in use. Consider deactivating it instead.'


def _save_tax_configuration(serializer, **save_kwargs):
    """Save inside one transaction so the default flag never exists twice"""
    with transaction.atomic():
        config = serializer.save(**save_kwargs)
        if config.is_default:
            set_default_tax_configuration(config)
    return config


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def tax_configuration_list_create(request):
    """List the company's tax configurations or create a new one"""
    company = get_request_company(request)

    if request.method == 'GET':
        configs = TaxConfiguration.objects.filter(company=company).order_by('-is_default', 'name')
        if request.query_params.get('active_only') in ('true', '1'):
            configs = [config for config in configs if config.effective_status]
        serializer = TaxConfigurationSerializer(configs, many=True)
        return Response(serializer.data)

    serializer = TaxConfigurationSerializer(data=request.data, context={'company': company})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        config = _save_tax_configuration(serializer, company=company, created_by=request.user)
    except IntegrityError:
        return Response({'error': 'Tax code already exists for this company'}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='create',
        model_name='TaxConfiguration',
        object_id=config.id,
        object_reference=config.code,
        changes={'rate': str(config.rate), 'is_default': config.is_default},
        company=company,
    )
    return Response(TaxConfigurationSerializer(config).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def tax_configuration_detail(request, pk):
    """Retrieve, update or delete a tax configuration"""
    company = get_request_company(request)
    config = get_object_or_404(TaxConfiguration, pk=pk, company=company)

    if request.method == 'GET':
        return Response(TaxConfigurationSerializer(config).data)

    if request.method == 'DELETE':
        if tax_configuration_in_use(config):
            return Response({'error': IN_USE_MESSAGE}, status=status.HTTP_400_BAD_REQUEST)
        code = config.code
        try:
            config.delete()
        except ProtectedError:
            return Response({'error': IN_USE_MESSAGE}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(
            request=request,
            action='delete',
            model_name='TaxConfiguration',
            object_id=pk,
            object_reference=code,
            company=company,
        )
        return Response({'message': 'Tax configuration deleted successfully'})

    old_rate = config.rate
    serializer = TaxConfigurationSerializer(
        config, data=request.data, partial=request.method == 'PATCH', context={'company': company}
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        config = _save_tax_configuration(serializer)
    except IntegrityError:
        return Response({'error': 'Tax code already exists for this company'}, status=status.HTTP_400_BAD_REQUEST)

    if old_rate != config.rate:
        logger.info(f"Tax configuration {config.code} rate changed from {old_rate} to {config.rate}")
    create_audit_log(
        request=request,
        action='update',
        model_name='TaxConfiguration',
        object_id=config.id,
        object_reference=config.code,
        changes={'rate': {'old': str(old_rate), 'new': str(config.rate)}} if old_rate != config.rate else {},
        company=company,
    )
    return Response(TaxConfigurationSerializer(config).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tax_exemption_reasons(request):
    """Active exemption reasons ordered by name"""
    company = get_request_company(request)
    reasons = TaxExemptionReason.objects.filter(company=company, is_active=True).order_by('name')
    return Response(TaxExemptionReasonSerializer(reasons, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def applicable_tax_rate(request):
    """Preview the VAT rate a product would carry for a customer"""
    from invoicing.catalog.models import Product
    from invoicing.parties.models import Customer

    company = get_request_company(request)
    product = None
    customer = None
    product_id = request.query_params.get('product')
    customer_id = request.query_params.get('customer')
    if product_id:
        product = get_object_or_404(Product, pk=product_id, company=company)
    if customer_id:
        customer = get_object_or_404(Customer, pk=customer_id, company=company)

    rate = get_applicable_tax_rate(company, product=product, customer=customer)
    return Response({'rate': str(rate)})
