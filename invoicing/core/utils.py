"""Request helpers and audit logging"""
import logging

from django.core.paginator import Paginator
from django.db import transaction
from rest_framework.exceptions import APIException, PermissionDenied
from rest_framework.response import Response

from .conf import invoicing_setting
from .models import AuditLog, Company

logger = logging.getLogger(__name__)


class CompanyContextMissing(APIException):
    status_code = 400
    default_detail = 'Company context is required (X-Company-Id header or a user assigned to a company).'
    default_code = 'company_required'


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def get_request_company(request):
    """
    Resolve the company a request operates on.

    The X-Company-Id header wins, then the authenticated user's company.
    Non-superusers may only address their own company.
    """
    user = getattr(request, 'user', None)
    user_company = getattr(user, 'company', None) if user and user.is_authenticated else None
    header_value = request.headers.get('X-Company-Id')

    if header_value:
        try:
            company = Company.objects.get(pk=int(header_value))
        except (ValueError, Company.DoesNotExist):
            raise CompanyContextMissing(f'Unknown company: {header_value}')
        if user_company and user_company.pk != company.pk and not user.is_superuser:
            raise PermissionDenied('You do not have access to this company.')
        return company

    if user_company is None:
        raise CompanyContextMissing()
    return user_company


def paginated_response(request, queryset, serializer_class):
    """Paginate a queryset with ?page= and ?limit= and wrap it in the list envelope"""
    try:
        page = int(request.query_params.get('page', 1))
        limit = int(request.query_params.get('limit', invoicing_setting('DEFAULT_PAGE_SIZE')))
    except ValueError:
        page, limit = 1, invoicing_setting('DEFAULT_PAGE_SIZE')
    limit = max(1, min(limit, 500))

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    serializer = serializer_class(page_obj, many=True)
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_reference=None, company=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (invoice_create, document_convert, payment_add, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_reference: Reference identifier (e.g., invoice number)
        company: Company the entry belongs to
    """
    if not action or not model_name or not object_id:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    try:
        audit_user = user
        if audit_user is None and request is not None and hasattr(request, 'user'):
            audit_user = request.user

        with transaction.atomic():
            return AuditLog.objects.create(
                company=company,
                user=audit_user if audit_user and audit_user.is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_reference=object_reference,
                changes=changes or {},
                ip_address=get_client_ip(request) if request else None,
            )
    except Exception as e:
        # Never fail the main operation because the audit row could not be written
        logger.error(f"Failed to create audit log: {str(e)}")
        return None
