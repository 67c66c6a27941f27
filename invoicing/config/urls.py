"""
URL configuration for the invoicing project.

Every app contributes its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Invoicing Admin Panel"
admin.site.site_title = "Invoicing Admin Portal"
admin.site.index_title = "Welcome to the Invoicing Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('invoicing.core.urls')),
    path('api/v1/', include('invoicing.catalog.urls')),
    path('api/v1/', include('invoicing.inventory.urls')),
    path('api/v1/', include('invoicing.parties.urls')),
    path('api/v1/', include('invoicing.taxes.urls')),
    path('api/v1/', include('invoicing.sales.urls')),
    path('api/v1/', include('invoicing.reports.urls')),
]
