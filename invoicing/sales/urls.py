from django.urls import path
from .views import (
    quotation_list_create, quotation_detail, quotation_status,
    quotation_conversion_options, quotation_convert_to_proforma, quotation_convert_to_invoice,
    proforma_list_create, proforma_detail, proforma_status,
    proforma_conversion_options, proforma_convert_to_invoice,
    invoice_list_create, invoice_detail, invoice_status, invoice_payments,
    payment_list, payment_detail,
    number_sequence_list, number_sequence_detail,
)

urlpatterns = [
    path('quotations/', quotation_list_create, name='quotation-list-create'),
    path('quotations/<int:pk>/', quotation_detail, name='quotation-detail'),
    path('quotations/<int:pk>/status/', quotation_status, name='quotation-status'),
    path('quotations/<int:pk>/conversion-options/', quotation_conversion_options, name='quotation-conversion-options'),
    path('quotations/<int:pk>/convert-to-proforma/', quotation_convert_to_proforma, name='quotation-convert-to-proforma'),
    path('quotations/<int:pk>/convert-to-invoice/', quotation_convert_to_invoice, name='quotation-convert-to-invoice'),
    path('proforma-invoices/', proforma_list_create, name='proforma-list-create'),
    path('proforma-invoices/<int:pk>/', proforma_detail, name='proforma-detail'),
    path('proforma-invoices/<int:pk>/status/', proforma_status, name='proforma-status'),
    path('proforma-invoices/<int:pk>/conversion-options/', proforma_conversion_options, name='proforma-conversion-options'),
    path('proforma-invoices/<int:pk>/convert-to-invoice/', proforma_convert_to_invoice, name='proforma-convert-to-invoice'),
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),
    path('invoices/<int:pk>/status/', invoice_status, name='invoice-status'),
    path('invoices/<int:pk>/payments/', invoice_payments, name='invoice-payments'),
    path('payments/', payment_list, name='payment-list'),
    path('payments/<int:pk>/', payment_detail, name='payment-detail'),
    path('number-sequences/', number_sequence_list, name='number-sequence-list'),
    path('number-sequences/<int:pk>/', number_sequence_detail, name='number-sequence-detail'),
]
