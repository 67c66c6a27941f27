from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Company, AuditLog


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'kra_pin', 'currency', 'vat_rate', 'invoice_prefix', 'created_at']
    search_fields = ['name', 'kra_pin']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'first_name', 'last_name', 'company', 'is_active', 'is_staff']
    list_filter = ['is_active', 'is_staff', 'company']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Business', {'fields': ('phone', 'company')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'model_name', 'object_reference', 'user', 'company', 'ip_address']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['object_reference', 'object_id']
    ordering = ['-created_at']
    readonly_fields = ['company', 'user', 'action', 'model_name', 'object_id', 'object_reference', 'changes', 'ip_address', 'created_at']
