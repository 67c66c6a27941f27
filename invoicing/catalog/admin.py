from django.contrib import admin
from .models import Category, Product, ProductVariant


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'parent', 'is_active', 'created_at']
    list_filter = ['is_active', 'company']
    search_fields = ['name']
    ordering = ['name']


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'company', 'category', 'selling_price', 'current_stock', 'taxable', 'status', 'is_active']
    list_filter = ['status', 'is_active', 'taxable', 'track_inventory', 'company']
    search_fields = ['name', 'sku', 'description']
    readonly_fields = ['current_stock', 'created_at', 'updated_at']
    inlines = [ProductVariantInline]
    ordering = ['name']
