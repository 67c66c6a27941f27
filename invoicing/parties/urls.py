from django.urls import path
from .views import customer_list_create, customer_detail, customer_outstanding

urlpatterns = [
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),
    path('customers/<int:pk>/outstanding/', customer_outstanding, name='customer-outstanding'),
]
