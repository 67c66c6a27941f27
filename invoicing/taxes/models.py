from django.db import models
from django.utils import timezone
from decimal import Decimal
from invoicing.core.models import Company, User


class TaxConfiguration(models.Model):
    """Named tax rate a company applies to products and document lines"""
    TAX_TYPE_CHOICES = [
        ('vat', 'VAT'),
        ('excise', 'Excise Duty'),
        ('withholding', 'Withholding Tax'),
        ('service', 'Service Charge'),
        ('other', 'Other'),
    ]

    CALCULATION_METHOD_CHOICES = [
        ('exclusive', 'Exclusive'),
        ('inclusive', 'Inclusive'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='tax_configurations')
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20)
    tax_type = models.CharField(max_length=20, choices=TAX_TYPE_CHOICES, default='vat')
    rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    calculation_method = models.CharField(max_length=20, choices=CALCULATION_METHOD_CHOICES, default='exclusive')
    description = models.TextField(blank=True)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    applicable_from = models.DateField(null=True, blank=True)
    applicable_until = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='tax_configurations')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.rate}%)"

    def is_applicable_on(self, on_date=None):
        """Active and inside the applicable_from / applicable_until window"""
        on_date = on_date or timezone.localdate()
        if not self.is_active:
            return False
        if self.applicable_from and self.applicable_from > on_date:
            return False
        if self.applicable_until and self.applicable_until < on_date:
            return False
        return True

    @property
    def effective_status(self):
        if self.applicable_until and self.applicable_until < timezone.localdate():
            return False
        return self.is_active

    class Meta:
        db_table = 'tax_configurations'
        ordering = ['-is_default', 'name']
        constraints = [
            models.UniqueConstraint(fields=['company', 'code'], name='uniq_tax_config_company_code'),
        ]


class TaxExemptionReason(models.Model):
    """Reasons a customer can be exempted from VAT"""
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='tax_exemption_reasons')
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'tax_exemption_reasons'
        ordering = ['name']
