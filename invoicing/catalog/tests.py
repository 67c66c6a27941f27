"""
Test suite for the catalog module
Tests: categories, products, opening stock, soft delete, search and variants
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.catalog.models import Product
from invoicing.inventory.models import StockMovement


class ProductModelTests(TestCase):
    """Test Product model properties"""

    def setUp(self):
        self.company = TestDataFactory.create_company()

    def test_is_low_stock(self):
        product = TestDataFactory.create_product(self.company, current_stock=Decimal('3'), min_stock=Decimal('5'))
        self.assertTrue(product.is_low_stock)
        product.current_stock = Decimal('6')
        self.assertFalse(product.is_low_stock)

    def test_untracked_product_never_low(self):
        product = TestDataFactory.create_product(self.company, track_inventory=False)
        self.assertFalse(product.is_low_stock)

    def test_stock_value(self):
        product = TestDataFactory.create_product(
            self.company, current_stock=Decimal('4'), purchase_price=Decimal('25.00')
        )
        self.assertEqual(product.stock_value, Decimal('100.00'))


class CategoryAPITests(TestCase):
    """Test category endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_list(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Hardware'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/v1/categories/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['product_count'], 0)

    def test_parent_from_other_company_rejected(self):
        foreign = TestDataFactory.create_category(TestDataFactory.create_company())
        response = self.client.post('/api/v1/categories/', {'name': 'Tools', 'parent': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product_with_opening_stock(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Cement 50kg',
            'sku': 'CEM-50',
            'selling_price': '850.00',
            'purchase_price': '700.00',
            'opening_stock': '20',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['current_stock']), Decimal('20'))
        movement = StockMovement.objects.get(product_id=response.data['id'])
        self.assertEqual(movement.movement_type, 'in')
        self.assertEqual(movement.reference, 'Opening stock')

    def test_current_stock_is_read_only(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Nails', 'sku': 'NL-1', 'current_stock': '99',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Product.objects.get(pk=response.data['id']).current_stock, Decimal('0'))

    def test_duplicate_sku_rejected(self):
        TestDataFactory.create_product(self.company, sku='ABC-1')
        response = self.client.post('/api/v1/products/', {'name': 'Copy', 'sku': 'abc-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_same_sku_in_other_company_allowed(self):
        TestDataFactory.create_product(TestDataFactory.create_company(), sku='ABC-1')
        response = self.client.post('/api/v1/products/', {'name': 'Mine', 'sku': 'ABC-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bad', 'sku': 'BAD-1', 'selling_price': '-1.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_max_stock_below_min_rejected(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bad', 'sku': 'BAD-2', 'min_stock': '10', 'max_stock': '5',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_product(self.company, name='Blue Paint', selling_price=Decimal('500.00'))
        TestDataFactory.create_product(self.company, name='Red Paint', selling_price=Decimal('1500.00'))
        TestDataFactory.create_product(self.company, name='Brush', selling_price=Decimal('150.00'))

        response = self.client.get('/api/v1/products/?search=paint')
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/v1/products/?min_price=400&max_price=1000')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Blue Paint')

    def test_delete_unused_product(self):
        product = TestDataFactory.create_product(self.company)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())

    def test_delete_referenced_product_deactivates(self):
        product = TestDataFactory.create_product(self.company)
        customer = TestDataFactory.create_customer(self.company)
        TestDataFactory.create_quotation(self.company, customer, [TestDataFactory.line(product)])

        response = self.client.delete(f'/api/v1/products/{product.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertFalse(product.is_active)
        self.assertEqual(product.status, 'inactive')

    def test_low_stock(self):
        TestDataFactory.create_product(self.company, current_stock=Decimal('1'), min_stock=Decimal('5'))
        TestDataFactory.create_product(self.company, current_stock=Decimal('50'), min_stock=Decimal('5'))
        response = self.client.get('/api/v1/products/low-stock/')
        self.assertEqual(response.data['count'], 1)

    def test_search_needs_two_characters(self):
        TestDataFactory.create_product(self.company, name='Gloves')
        self.assertEqual(self.client.get('/api/v1/products/search/?q=g').data, [])
        response = self.client.get('/api/v1/products/search/?q=glo')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Gloves')

    def test_variants(self):
        product = TestDataFactory.create_product(self.company)
        url = f'/api/v1/products/{product.id}/variants/'
        response = self.client.post(url, {'name': 'Red - L', 'sku': 'V-RL', 'attributes': {'color': 'red'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(url, {'name': 'Red - L again', 'sku': 'V-RL'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get(url)
        self.assertEqual(len(response.data), 1)
