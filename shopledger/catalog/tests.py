"""
Test suite for the Catalog module
Tests: product CRUD, quantity adjustment, low stock, filters and API endpoints
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from shopledger.catalog import services
from shopledger.catalog.models import Product
from shopledger.core.exceptions import ValidationFailed
from shopledger.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopledger.inventory.models import StockMovement


class ProductServiceTests(TestCase):
    """Test the product inventory manager"""

    def test_create_product(self):
        product = services.create_product('Widget', '5.50', '9.99', quantity=3, minimum_quantity=1)
        self.assertEqual(product.name, 'Widget')
        self.assertEqual(product.purchase_price, Decimal('5.50'))
        self.assertEqual(product.sale_price, Decimal('9.99'))
        self.assertEqual(product.quantity, 3)
        self.assertIsNotNone(product.created_at)

    def test_create_rejects_empty_name(self):
        with self.assertRaises(ValidationFailed):
            services.create_product('   ', 1, 2)
        self.assertEqual(Product.objects.count(), 0)

    def test_create_rejects_negative_price(self):
        with self.assertRaises(ValidationFailed):
            services.create_product('Widget', -1, 2)
        with self.assertRaises(ValidationFailed):
            services.create_product('Widget', 1, -2)

    def test_create_rejects_negative_minimum(self):
        with self.assertRaises(ValidationFailed):
            services.create_product('Widget', 1, 2, minimum_quantity=-1)

    def test_update_merges_fields(self):
        product = TestDataFactory.create_product(name='Old')
        updated = services.update_product(product.id, name='New', sale_price='25.00')
        self.assertEqual(updated.name, 'New')
        self.assertEqual(updated.sale_price, Decimal('25.00'))
        self.assertEqual(updated.purchase_price, product.purchase_price)

    def test_update_rejects_quantity(self):
        product = TestDataFactory.create_product(quantity=5)
        with self.assertRaises(ValidationFailed):
            services.update_product(product.id, quantity=50)
        product.refresh_from_db()
        self.assertEqual(product.quantity, 5)

    def test_update_unknown_product(self):
        self.assertIsNone(services.update_product('00000000-0000-0000-0000-000000000000', name='X'))
        self.assertIsNone(services.update_product('not-an-id', name='X'))

    def test_delete_product(self):
        product = TestDataFactory.create_product()
        self.assertTrue(services.delete_product(product.id))
        self.assertFalse(Product.objects.filter(pk=product.id).exists())
        self.assertFalse(services.delete_product(product.id))

    def test_adjust_quantity_sums_deltas(self):
        product = TestDataFactory.create_product(quantity=10)
        for delta in (5, -3, -20, 7):
            services.adjust_quantity(product.id, delta)
        product.refresh_from_db()
        self.assertEqual(product.quantity, 10 + 5 - 3 - 20 + 7)

    def test_adjust_quantity_unknown_product(self):
        self.assertIsNone(services.adjust_quantity('00000000-0000-0000-0000-000000000000', 1))

    def test_list_low_stock(self):
        low = TestDataFactory.create_product(quantity=2, minimum_quantity=2)
        TestDataFactory.create_product(quantity=3, minimum_quantity=2)
        negative = TestDataFactory.create_product(quantity=-1, minimum_quantity=0)
        self.assertCountEqual(list(services.list_low_stock()), [low, negative])

    def test_stock_value(self):
        TestDataFactory.create_product(purchase_price=Decimal('2.00'), sale_price=Decimal('3.00'), quantity=4)
        TestDataFactory.create_product(purchase_price=Decimal('1.50'), sale_price=Decimal('2.50'), quantity=2)
        value = services.stock_value()
        self.assertEqual(value['purchase_value'], Decimal('11.00'))
        self.assertEqual(value['sale_value'], Decimal('17.00'))


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_product(self):
        data = {'name': 'Soap', 'purchase_price': '1.00', 'sale_price': '1.50', 'quantity': 10, 'minimum_quantity': 2}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Soap')
        self.assertEqual(response.data['quantity'], 10)

    def test_create_product_empty_name(self):
        data = {'name': '', 'purchase_price': '1.00', 'sale_price': '1.50'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_failed')

    def test_list_with_search(self):
        TestDataFactory.create_product(name='Blue Pen')
        TestDataFactory.create_product(name='Red Pencil')
        TestDataFactory.create_product(name='Notebook')
        response = self.client.get('/api/v1/products/?search=pen')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({row['name'] for row in response.data}, {'Blue Pen', 'Red Pencil'})

    def test_list_low_stock_filter(self):
        TestDataFactory.create_product(name='Low', quantity=1, minimum_quantity=5)
        TestDataFactory.create_product(name='Fine', quantity=10, minimum_quantity=5)
        response = self.client.get('/api/v1/products/?low_stock=true')
        self.assertEqual([row['name'] for row in response.data], ['Low'])

    def test_low_stock_endpoint(self):
        TestDataFactory.create_product(name='Low', quantity=0, minimum_quantity=1)
        response = self.client.get('/api/v1/products/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]['is_low_stock'])

    def test_detail_not_found(self):
        response = self.client.get('/api/v1/products/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'not_found')

    def test_patch_product(self):
        product = TestDataFactory.create_product()
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'minimum_quantity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['minimum_quantity'], 4)

    def test_patch_quantity_rejected(self):
        product = TestDataFactory.create_product(quantity=1)
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'quantity': 99}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_product(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_adjust_quantity_records_movement(self):
        product = TestDataFactory.create_product(quantity=10)
        response = self.client.post(
            f'/api/v1/products/{product.id}/adjust-quantity/', {'delta': -4, 'reason': 'damaged'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 6)
        movement = StockMovement.objects.get(product_id=product.id)
        self.assertEqual(movement.movement_type, 'adjustment')
        self.assertEqual(movement.quantity, -4)
        self.assertEqual(movement.reason, 'damaged')

    def test_adjust_quantity_zero_rejected(self):
        product = TestDataFactory.create_product(quantity=10)
        response = self.client.post(f'/api/v1/products/{product.id}/adjust-quantity/', {'delta': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
