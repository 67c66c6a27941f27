from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'email', 'phone', 'kra_pin', 'credit_limit', 'current_balance', 'is_tax_exempt', 'is_active']
    list_filter = ['is_active', 'is_tax_exempt', 'company']
    search_fields = ['name', 'email', 'phone', 'kra_pin']
    readonly_fields = ['current_balance', 'created_at', 'updated_at']
    ordering = ['name']
