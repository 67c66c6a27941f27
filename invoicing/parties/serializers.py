from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    balance = serializers.DecimalField(source='current_balance', max_digits=14, decimal_places=2, read_only=True)
    exemption_reason_name = serializers.CharField(source='exemption_reason.name', read_only=True)
    available_credit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'email', 'phone', 'kra_pin', 'address', 'credit_limit', 'balance', 'available_credit',
            'is_tax_exempt', 'exemption_reason', 'exemption_reason_name', 'is_active',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Customer name is required')
        return value

    def validate_credit_limit(self, value):
        if value < 0:
            raise serializers.ValidationError('Credit limit cannot be negative')
        return value

    def validate_exemption_reason(self, value):
        company = self.context.get('company')
        if value is not None and company is not None and value.company_id != company.id:
            raise serializers.ValidationError('Exemption reason does not exist')
        return value

    def validate(self, attrs):
        is_tax_exempt = attrs.get('is_tax_exempt', getattr(self.instance, 'is_tax_exempt', False))
        if not is_tax_exempt:
            attrs['exemption_reason'] = None
        return attrs
