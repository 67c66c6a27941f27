from django.db import models
from decimal import Decimal
from invoicing.core.models import Company, User


class Customer(models.Model):
    """Customers"""
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='customers')
    name = models.CharField(max_length=200, db_index=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    kra_pin = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    credit_limit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    # Running receivable: invoices add, payments and cancellations subtract
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    is_tax_exempt = models.BooleanField(default=False)
    exemption_reason = models.ForeignKey('taxes.TaxExemptionReason', on_delete=models.SET_NULL, null=True, blank=True, related_name='customers')
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='customers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def has_documents(self):
        return (
            self.quotations.exists() or
            self.proforma_invoices.exists() or
            self.invoices.exists()
        )

    @property
    def available_credit(self):
        if not self.credit_limit:
            return None
        return self.credit_limit - self.current_balance

    class Meta:
        db_table = 'customers'
        ordering = ['name']
