from decimal import Decimal
from rest_framework import serializers
from .models import Category, Product, ProductVariant


class CategorySerializer(serializers.ModelSerializer):
    parent_name = serializers.CharField(source='parent.name', read_only=True)
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'parent', 'parent_name', 'description', 'is_active', 'product_count', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        return obj.products.count()

    def validate_parent(self, value):
        company = self.context.get('company')
        if value is not None and company is not None and value.company_id != company.id:
            raise serializers.ValidationError('Parent category does not exist')
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError('A category cannot be its own parent')
        return value


class ProductVariantSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductVariant
        fields = ['id', 'product', 'name', 'sku', 'attributes', 'price', 'stock', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['product', 'created_at', 'updated_at']

    def validate_attributes(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Attributes must be an object of key/value pairs')
        return {str(k): str(v) for k, v in value.items()}


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    tax_configuration_name = serializers.CharField(source='tax_configuration.name', read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)
    opening_stock = serializers.DecimalField(max_digits=12, decimal_places=3, write_only=True, required=False, min_value=Decimal('0'))

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'description', 'category', 'category_name', 'unit',
            'purchase_price', 'selling_price', 'wholesale_price', 'retail_price',
            'current_stock', 'opening_stock', 'min_stock', 'max_stock', 'reorder_level', 'is_low_stock',
            'taxable', 'tax_rate', 'tax_configuration', 'tax_configuration_name',
            'track_inventory', 'allow_backorders', 'status', 'is_active', 'variants',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['current_stock', 'created_by', 'created_at', 'updated_at']

    def validate_sku(self, value):
        company = self.context.get('company')
        value = value.strip()
        queryset = Product.objects.filter(company=company, sku__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A product with this SKU already exists')
        return value

    def validate_category(self, value):
        company = self.context.get('company')
        if value is not None and value.company_id != company.id:
            raise serializers.ValidationError('Category does not exist')
        return value

    def validate_tax_configuration(self, value):
        company = self.context.get('company')
        if value is not None and value.company_id != company.id:
            raise serializers.ValidationError('Tax configuration does not exist')
        return value

    def validate_tax_rate(self, value):
        if value is not None and (value < 0 or value > 100):
            raise serializers.ValidationError('Tax rate must be between 0 and 100')
        return value

    def validate(self, attrs):
        for field in ('purchase_price', 'selling_price', 'wholesale_price', 'retail_price'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'Price cannot be negative'})

        min_stock = attrs.get('min_stock', getattr(self.instance, 'min_stock', Decimal('0')))
        max_stock = attrs.get('max_stock', getattr(self.instance, 'max_stock', Decimal('0')))
        if max_stock and min_stock and max_stock < min_stock:
            raise serializers.ValidationError({'max_stock': 'Maximum stock cannot be lower than minimum stock'})
        return attrs
