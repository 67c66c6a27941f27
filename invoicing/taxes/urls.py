from django.urls import path
from .views import (
    tax_configuration_list_create, tax_configuration_detail,
    tax_exemption_reasons, applicable_tax_rate,
)

urlpatterns = [
    path('taxes/', tax_configuration_list_create, name='tax-configuration-list-create'),
    path('taxes/applicable-rate/', applicable_tax_rate, name='tax-applicable-rate'),
    path('taxes/exemptions/reasons/', tax_exemption_reasons, name='tax-exemption-reasons'),
    path('taxes/<int:pk>/', tax_configuration_detail, name='tax-configuration-detail'),
]
