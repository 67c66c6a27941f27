"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from invoicing.core.models import Company
from invoicing.catalog.models import Category, Product
from invoicing.parties.models import Customer
from invoicing.taxes.models import TaxConfiguration, TaxExemptionReason
from invoicing.sales.services import create_document
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_company(name=None, vat_rate=Decimal('16.00'), invoice_prefix='INV'):
        """Create a test company"""
        if not name:
            name = f'Company_{TestDataFactory.random_string(6)}'
        return Company.objects.create(
            name=name,
            email=f'{name.lower()}@test.com',
            vat_rate=vat_rate,
            invoice_prefix=invoice_prefix
        )

    @staticmethod
    def create_user(company=None, username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user, assigned to ``company`` (a new one when omitted)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        if company is None:
            company = TestDataFactory.create_company()
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        user.company = company
        user.save(update_fields=['company'])
        return user

    @staticmethod
    def create_category(company, name=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(company=company, name=name, description=f'Test category {name}')

    @staticmethod
    def create_tax_configuration(company, name=None, code=None, rate=Decimal('16.00'), is_default=False, **kwargs):
        """Create a test tax configuration"""
        if not name:
            name = f'Tax_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'T{TestDataFactory.random_string(6).upper()}'
        return TaxConfiguration.objects.create(
            company=company,
            name=name,
            code=code,
            rate=rate,
            is_default=is_default,
            **kwargs
        )

    @staticmethod
    def create_exemption_reason(company, name=None, code=None):
        """Create a test tax exemption reason"""
        if not name:
            name = f'Exemption_{TestDataFactory.random_string(6)}'
        return TaxExemptionReason.objects.create(
            company=company,
            name=name,
            code=code or TestDataFactory.random_string(6).upper()
        )

    @staticmethod
    def create_product(company, name=None, sku=None, selling_price=Decimal('100.00'), category=None, **kwargs):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        kwargs.setdefault('purchase_price', Decimal('60.00'))
        kwargs.setdefault('min_stock', Decimal('5.000'))
        return Product.objects.create(
            company=company,
            name=name,
            sku=sku,
            category=category,
            selling_price=selling_price,
            **kwargs
        )

    @staticmethod
    def create_customer(company, name=None, phone=None, email=None, **kwargs):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'07{random.randint(10000000, 99999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(
            company=company,
            name=name,
            phone=phone,
            email=email,
            **kwargs
        )

    @staticmethod
    def line(product, quantity=Decimal('1'), unit_price=None, **kwargs):
        """Item payload for the document services"""
        item = {'product': product.pk, 'quantity': quantity}
        if unit_price is not None:
            item['unit_price'] = unit_price
        item.update(kwargs)
        return item

    @staticmethod
    def create_document(doc_type, company, customer, items=None, user=None, **header):
        """Create a quotation, proforma or invoice through the document services"""
        if items is None:
            product = TestDataFactory.create_product(company)
            items = [TestDataFactory.line(product, Decimal('2'), Decimal('100.00'), vat_rate=Decimal('16.00'))]
        return create_document(doc_type, company, customer, items, user=user, **header)

    @staticmethod
    def create_quotation(company, customer, items=None, user=None, **header):
        return TestDataFactory.create_document('quotation', company, customer, items, user=user, **header)

    @staticmethod
    def create_proforma(company, customer, items=None, user=None, **header):
        return TestDataFactory.create_document('proforma', company, customer, items, user=user, **header)

    @staticmethod
    def create_invoice(company, customer, items=None, user=None, **header):
        return TestDataFactory.create_document('invoice', company, customer, items, user=user, **header)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
