from decimal import Decimal
from rest_framework import serializers
from .models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'product_name', 'product_sku', 'movement_type', 'quantity',
            'previous_stock', 'new_stock', 'reference', 'notes',
            'created_by', 'created_by_username', 'created_at'
        ]
        read_only_fields = fields


class StockUpdateSerializer(serializers.Serializer):
    """Payload of PUT products/<id>/stock/"""
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal('0'))
    movement_type = serializers.ChoiceField(choices=StockMovement.MOVEMENT_TYPE_CHOICES)
    reference = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['movement_type'] != 'adjustment' and attrs['quantity'] == 0:
            raise serializers.ValidationError({'quantity': 'Quantity must be greater than zero'})
        return attrs
