import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import connection, DatabaseError
from django.shortcuts import get_object_or_404
from .models import AuditLog
from .serializers import UserSerializer, CompanySerializer, AuditLogSerializer
from .utils import get_request_company, paginated_response

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['company_id'] = user.company_id
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Liveness probe that also reports database connectivity"""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        database = 'connected'
    except DatabaseError as e:
        logger.error(f"Health check database error: {str(e)}")
        database = 'unavailable'
    http_status = status.HTTP_200_OK if database == 'connected' else status.HTTP_503_SERVICE_UNAVAILABLE
    return Response({'status': 'ok' if database == 'connected' else 'degraded', 'database': database}, status=http_status)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user info"""
    serializer = UserSerializer(request.user)
    return Response(serializer.data)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def company_settings(request):
    """Retrieve or update the settings of the current company"""
    company = get_request_company(request)

    if request.method == 'GET':
        serializer = CompanySerializer(company)
        return Response(serializer.data)

    if not (request.user.is_staff or request.user.is_superuser):
        return Response({'error': 'Only administrators can change company settings'}, status=status.HTTP_403_FORBIDDEN)

    serializer = CompanySerializer(company, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """Activity log for the current company"""
    company = get_request_company(request)
    queryset = AuditLog.objects.select_related('user').filter(company=company)

    action = request.query_params.get('action', None)
    model_name = request.query_params.get('model_name', None)
    search = request.query_params.get('search', None)
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)

    if action:
        queryset = queryset.filter(action=action)
    if model_name:
        queryset = queryset.filter(model_name=model_name)
    if search:
        queryset = queryset.filter(object_reference__icontains=search)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    return paginated_response(request, queryset.order_by('-created_at', '-id'), AuditLogSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve a single activity log entry"""
    company = get_request_company(request)
    log = get_object_or_404(AuditLog, pk=pk, company=company)
    return Response(AuditLogSerializer(log).data)
