from django.urls import path
from .views import product_stock_update, product_stock_movements, stock_movement_list

urlpatterns = [
    path('products/<int:pk>/stock/', product_stock_update, name='product-stock-update'),
    path('products/<int:pk>/movements/', product_stock_movements, name='product-stock-movements'),
    path('stock-movements/', stock_movement_list, name='stock-movement-list'),
]
