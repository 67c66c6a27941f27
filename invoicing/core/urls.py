from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me, health,
    company_settings, audit_log_list, audit_log_detail
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    path('health/', health, name='health'),

    # Company settings
    path('company/', company_settings, name='company-settings'),

    # Activity log
    path('activity-log/', audit_log_list, name='activity-log'),
    path('activity-log/<int:pk>/', audit_log_detail, name='activity-log-detail'),
]
