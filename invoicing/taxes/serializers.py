from rest_framework import serializers
from .models import TaxConfiguration, TaxExemptionReason


class TaxConfigurationSerializer(serializers.ModelSerializer):
    effective_status = serializers.BooleanField(read_only=True)

    class Meta:
        model = TaxConfiguration
        fields = [
            'id', 'name', 'code', 'tax_type', 'rate', 'calculation_method', 'description',
            'is_default', 'is_active', 'effective_status', 'applicable_from', 'applicable_until',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_rate(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('Tax rate must be between 0 and 100')
        return value

    def validate_code(self, value):
        value = value.strip().upper()
        company = self.context.get('company')
        queryset = TaxConfiguration.objects.filter(company=company, code=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('Tax code already exists for this company')
        return value

    def validate(self, attrs):
        applicable_from = attrs.get('applicable_from', getattr(self.instance, 'applicable_from', None))
        applicable_until = attrs.get('applicable_until', getattr(self.instance, 'applicable_until', None))
        if applicable_from and applicable_until and applicable_until < applicable_from:
            raise serializers.ValidationError({'applicable_until': 'End date cannot be before the start date'})
        return attrs


class TaxExemptionReasonSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaxExemptionReason
        fields = ['id', 'name', 'code', 'description', 'is_active']
