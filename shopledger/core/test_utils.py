"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from shopledger.catalog import services as catalog_services
from shopledger.parties.services import customer_ledger, supplier_ledger
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
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_product(name=None, purchase_price=Decimal('10.00'), sale_price=Decimal('20.00'),
                       quantity=0, minimum_quantity=0):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return catalog_services.create_product(
            name=name,
            purchase_price=purchase_price,
            sale_price=sale_price,
            quantity=quantity,
            minimum_quantity=minimum_quantity,
        )

    @staticmethod
    def create_customer(name=None, phone=None, address=''):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        return customer_ledger.create(name, phone or f'9{random.randint(100000000, 999999999)}', address)

    @staticmethod
    def create_supplier(name=None, phone=None, address=''):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        return supplier_ledger.create(name, phone or f'8{random.randint(100000000, 999999999)}', address)


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
