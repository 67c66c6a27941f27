from django.contrib import admin
from .models import TaxConfiguration, TaxExemptionReason


@admin.register(TaxConfiguration)
class TaxConfigurationAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'company', 'tax_type', 'rate', 'calculation_method', 'is_default', 'is_active', 'applicable_until']
    list_filter = ['tax_type', 'is_default', 'is_active', 'company']
    search_fields = ['name', 'code']
    ordering = ['-is_default', 'name']


@admin.register(TaxExemptionReason)
class TaxExemptionReasonAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'company', 'is_active']
    list_filter = ['is_active', 'company']
    search_fields = ['name', 'code']
