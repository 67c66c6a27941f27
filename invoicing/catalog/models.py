from django.db import models
from decimal import Decimal
from invoicing.core.models import Company, User


class Category(models.Model):
    """Product categories"""
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='categories')
    name = models.CharField(max_length=200, db_index=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'product_categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Product master"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('discontinued', 'Discontinued'),
        ('out_of_stock', 'Out of Stock'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=200, db_index=True)
    sku = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    unit = models.CharField(max_length=30, default='piece')
    purchase_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    wholesale_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    retail_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    current_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    min_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    max_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    reorder_level = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    taxable = models.BooleanField(default=True)
    # Explicit VAT % override; when null the tax configuration / company rate applies
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    tax_configuration = models.ForeignKey('taxes.TaxConfiguration', on_delete=models.PROTECT, null=True, blank=True, related_name='products')
    track_inventory = models.BooleanField(default=True)
    allow_backorders = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def is_low_stock(self):
        return self.track_inventory and self.current_stock <= self.min_stock

    @property
    def stock_value(self):
        return self.current_stock * self.purchase_price

    class Meta:
        db_table = 'products'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['company', 'sku'], name='uniq_product_company_sku'),
        ]


class ProductVariant(models.Model):
    """Product variants (size, color, etc.)"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    name = models.CharField(max_length=200)  # e.g., "Red - Large"
    sku = models.CharField(max_length=100)
    attributes = models.JSONField(default=dict, blank=True)  # e.g., {"color": "red", "size": "L"}
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} - {self.name}"

    class Meta:
        db_table = 'product_variants'
        constraints = [
            models.UniqueConstraint(fields=['product', 'sku'], name='uniq_variant_product_sku'),
        ]
