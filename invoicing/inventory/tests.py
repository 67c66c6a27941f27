"""
Test suite for the inventory module
Tests: stock level rules, movement recording and stock endpoints
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from invoicing.core.models import AuditLog
from invoicing.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from invoicing.inventory.models import StockMovement
from invoicing.inventory.services import apply_stock_movement, next_stock_level


class StockLevelTests(TestCase):
    """Test next_stock_level rules"""

    def test_in_adds(self):
        self.assertEqual(next_stock_level(Decimal('5'), Decimal('3'), 'in'), Decimal('8'))

    def test_out_never_goes_negative(self):
        self.assertEqual(next_stock_level(Decimal('5'), Decimal('3'), 'out'), Decimal('2'))
        self.assertEqual(next_stock_level(Decimal('5'), Decimal('9'), 'out'), Decimal('0'))

    def test_adjustment_sets_level(self):
        self.assertEqual(next_stock_level(Decimal('5'), Decimal('12'), 'adjustment'), Decimal('12'))

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            next_stock_level(Decimal('5'), Decimal('1'), 'transfer')


class StockMovementServiceTests(TestCase):
    """Test apply_stock_movement"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.product = TestDataFactory.create_product(self.company, current_stock=Decimal('10'))

    def test_records_movement(self):
        movement = apply_stock_movement(self.product, Decimal('4'), 'out', user=self.user, reference='DN-1')
        self.assertEqual(movement.previous_stock, Decimal('10'))
        self.assertEqual(movement.new_stock, Decimal('6'))
        self.assertEqual(movement.created_by, self.user)
        self.assertEqual(self.product.current_stock, Decimal('6'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('6'))

    def test_invalid_movements(self):
        with self.assertRaises(ValueError):
            apply_stock_movement(self.product, Decimal('-1'), 'in')
        with self.assertRaises(ValueError):
            apply_stock_movement(self.product, Decimal('0'), 'out')
        with self.assertRaises(ValueError):
            apply_stock_movement(self.product, Decimal('1'), 'transfer')
        self.assertFalse(StockMovement.objects.exists())

    def test_zero_adjustment_allowed(self):
        movement = apply_stock_movement(self.product, Decimal('0'), 'adjustment')
        self.assertEqual(movement.new_stock, Decimal('0'))


class StockAPITests(TestCase):
    """Test stock endpoints"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user(company=self.company)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.company, current_stock=Decimal('10'))

    def test_stock_update(self):
        response = self.client.put(
            f'/api/v1/products/{self.product.id}/stock/',
            {'quantity': '5', 'movement_type': 'in', 'reference': 'GRN-7'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['product']['current_stock']), Decimal('15'))
        self.assertEqual(response.data['movement']['reference'], 'GRN-7')
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust', company=self.company).exists())

    def test_stock_update_validation(self):
        response = self.client.put(
            f'/api/v1/products/{self.product.id}/stock/',
            {'quantity': '0', 'movement_type': 'out'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(
            f'/api/v1/products/{self.product.id}/stock/',
            {'quantity': '1', 'movement_type': 'transfer'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_movement_history(self):
        apply_stock_movement(self.product, Decimal('2'), 'out')
        apply_stock_movement(self.product, Decimal('20'), 'adjustment')
        other = TestDataFactory.create_product(TestDataFactory.create_company())
        apply_stock_movement(other, Decimal('1'), 'in')

        response = self.client.get(f'/api/v1/products/{self.product.id}/movements/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['results'][0]['movement_type'], 'adjustment')

        response = self.client.get('/api/v1/stock-movements/?movement_type=out')
        self.assertEqual(response.data['count'], 1)
