"""
Test suite for the Inventory module
Tests: stock-in (with and without supplier purchase), movements, manual adjustments and the audit workflow
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from shopledger.catalog import services as catalog_services
from shopledger.catalog.models import Product
from shopledger.core.exceptions import AuditLocked, ImmutableRecord, ValidationFailed
from shopledger.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopledger.inventory import audits, services
from shopledger.inventory.models import InventoryAudit, StockMovement
from shopledger.parties.models import SupplierTransaction
from shopledger.parties.services import supplier_ledger
from shopledger.pos import services as pos_services
from shopledger.pos.services import CartLine

MISSING_ID = '00000000-0000-0000-0000-000000000000'


class StockInTests(TestCase):
    """Test the stock movement recorder"""

    def setUp(self):
        self.product = TestDataFactory.create_product(quantity=10, minimum_quantity=2, purchase_price=Decimal('4.00'))

    def test_stock_in_adds_quantity_and_movement(self):
        movement = services.stock_in(self.product.id, 5, 'restock')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 15)
        self.assertEqual(movement.quantity, 5)
        self.assertEqual(movement.movement_type, 'in')
        self.assertEqual(movement.reason, 'restock')
        self.assertEqual(movement.product_name, self.product.name)
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_stock_in_rejects_non_positive_quantity(self):
        for quantity in (0, -3):
            with self.assertRaises(ValidationFailed):
                services.stock_in(self.product.id, quantity)
        with self.assertRaises(ValidationFailed):
            services.stock_in(self.product.id, 1.5)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_stock_in_unknown_product(self):
        with self.assertRaises(ValidationFailed):
            services.stock_in(MISSING_ID, 1)

    def test_stock_in_with_supplier_posts_purchase(self):
        supplier = TestDataFactory.create_supplier()
        movement = services.stock_in(self.product.id, 3, 'delivery', supplier_id=supplier.id)
        supplier.refresh_from_db()
        self.assertEqual(supplier.balance, Decimal('12.00'))
        entry = SupplierTransaction.objects.get(supplier_id=supplier.id)
        self.assertEqual(entry.transaction_type, 'purchase')
        self.assertEqual(entry.amount, Decimal('12.00'))
        self.assertEqual(entry.stock_movement_id, movement.id)

    def test_stock_in_with_unit_cost(self):
        supplier = TestDataFactory.create_supplier()
        services.stock_in(self.product.id, 2, supplier_id=supplier.id, unit_cost='7.25')
        self.assertEqual(supplier_ledger.ledger_balance(supplier.id), Decimal('14.50'))

    def test_stock_in_unknown_supplier_rolls_back(self):
        with self.assertRaises(ValidationFailed):
            services.stock_in(self.product.id, 3, supplier_id=MISSING_ID)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_adjust_stock(self):
        product = services.adjust_stock(self.product.id, -4, 'broken')
        self.assertEqual(product.quantity, 6)
        movement = StockMovement.objects.get()
        self.assertEqual((movement.movement_type, movement.quantity), ('adjustment', -4))
        self.assertIsNone(services.adjust_stock(MISSING_ID, 1))

    def test_movements_are_append_only(self):
        movement = services.stock_in(self.product.id, 1)
        with self.assertRaises(ImmutableRecord):
            movement.save()
        with self.assertRaises(ImmutableRecord):
            movement.delete()

    def test_movement_survives_product_deletion(self):
        services.stock_in(self.product.id, 1)
        name = self.product.name
        catalog_services.delete_product(self.product.id)
        movement = services.list_movements(self.product.id).get()
        self.assertEqual(movement.product_id, self.product.id)
        self.assertEqual(movement.product_name, name)


class InventoryAuditTests(TestCase):
    """Test the draft -> approved audit workflow"""

    def setUp(self):
        self.first = TestDataFactory.create_product(quantity=10)
        self.second = TestDataFactory.create_product(quantity=4)
        self.third = TestDataFactory.create_product(quantity=0)

    def test_create_snapshots_every_product(self):
        audit = audits.create_audit('monthly count')
        items = list(audits.audit_items(audit.id))
        self.assertEqual(len(items), 3)
        for item in items:
            self.assertEqual(item.system_quantity, item.actual_quantity)
            self.assertEqual(item.difference, 0)
        self.assertEqual(audit.status, 'draft')

    def test_snapshot_is_frozen(self):
        audit = audits.create_audit()
        catalog_services.adjust_quantity(self.first.id, 5)
        item = audits.audit_items(audit.id).get(product_id=self.first.id)
        self.assertEqual(item.system_quantity, 10)

    def test_approve_without_edits_changes_nothing(self):
        audit = audits.create_audit()
        audits.approve_audit(audit.id)
        quantities = dict(Product.objects.values_list('id', 'quantity'))
        self.assertEqual(quantities, {self.first.id: 10, self.second.id: 4, self.third.id: 0})
        self.assertFalse(audits.audit_items(audit.id).exclude(difference=0).exists())
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_update_item_recomputes_difference(self):
        audit = audits.create_audit()
        item = audits.audit_items(audit.id).get(product_id=self.first.id)
        item = audits.update_item(item.id, 7)
        self.assertEqual(item.actual_quantity, 7)
        self.assertEqual(item.difference, -3)
        item = audits.update_item(item.id, 12)
        self.assertEqual(item.difference, 2)

    def test_update_item_rejects_negative(self):
        audit = audits.create_audit()
        item = audits.audit_items(audit.id).first()
        with self.assertRaises(ValidationFailed):
            audits.update_item(item.id, -1)

    def test_update_unknown_item(self):
        self.assertIsNone(audits.update_item(999999, 1))
        self.assertIsNone(audits.update_item('not-an-id', 1))
        self.assertIsNone(audits.update_item(None, 1))

    def test_approve_commits_counts(self):
        audit = audits.create_audit()
        catalog_services.adjust_quantity(self.second.id, -1)
        first_item = audits.audit_items(audit.id).get(product_id=self.first.id)
        second_item = audits.audit_items(audit.id).get(product_id=self.second.id)
        audits.update_item(first_item.id, 8)
        audits.update_item(second_item.id, 6)

        approved = audits.approve_audit(audit.id)
        self.assertEqual(approved.status, 'approved')
        self.assertIsNotNone(approved.approved_at)

        self.first.refresh_from_db()
        self.second.refresh_from_db()
        self.third.refresh_from_db()
        self.assertEqual(self.first.quantity, 8)
        # Absolute set, not a delta against the moved quantity
        self.assertEqual(self.second.quantity, 6)
        self.assertEqual(self.third.quantity, 0)

        movements = {m.product_id: m for m in StockMovement.objects.filter(movement_type='adjustment')}
        self.assertEqual(set(movements), {self.first.id, self.second.id})
        self.assertEqual(movements[self.first.id].quantity, -2)
        # Applied change against the moved quantity (3 -> 6), not the snapshot difference
        self.assertEqual(movements[self.second.id].quantity, 3)

    def test_movements_add_up_after_sale_during_audit(self):
        audit = audits.create_audit()
        pos_services.checkout([CartLine(self.second.id, 1)], 'cash')
        item = audits.audit_items(audit.id).get(product_id=self.second.id)
        audits.update_item(item.id, 6)
        audits.approve_audit(audit.id)

        self.second.refresh_from_db()
        self.assertEqual(self.second.quantity, 6)
        signed = 0
        for movement in StockMovement.objects.filter(product_id=self.second.id):
            signed += -movement.quantity if movement.movement_type == 'out' else movement.quantity
        self.assertEqual(4 + signed, self.second.quantity)

    def test_approve_skips_movement_when_stock_already_matches(self):
        audit = audits.create_audit()
        item = audits.audit_items(audit.id).get(product_id=self.first.id)
        audits.update_item(item.id, 12)
        services.stock_in(self.first.id, 2)
        audits.approve_audit(audit.id)
        self.first.refresh_from_db()
        self.assertEqual(self.first.quantity, 12)
        self.assertFalse(StockMovement.objects.filter(movement_type='adjustment').exists())

    def test_approved_audit_is_locked(self):
        audit = audits.create_audit()
        item = audits.audit_items(audit.id).first()
        audits.approve_audit(audit.id)
        with self.assertRaises(AuditLocked):
            audits.update_item(item.id, 99)
        with self.assertRaises(AuditLocked):
            audits.approve_audit(audit.id)
        with self.assertRaises(AuditLocked):
            InventoryAudit.objects.get(pk=audit.id).delete()
        item.refresh_from_db()
        self.assertEqual(item.actual_quantity, item.system_quantity)

    def test_approve_unknown_audit(self):
        self.assertIsNone(audits.approve_audit(MISSING_ID))

    def test_approve_skips_deleted_product(self):
        audit = audits.create_audit()
        item = audits.audit_items(audit.id).get(product_id=self.third.id)
        audits.update_item(item.id, 5)
        catalog_services.delete_product(self.third.id)
        with self.assertLogs('shopledger.inventory.audits', level='WARNING'):
            approved = audits.approve_audit(audit.id)
        self.assertEqual(approved.status, 'approved')
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_list_audits_newest_first(self):
        older = audits.create_audit('older')
        newer = audits.create_audit('newer')
        InventoryAudit.objects.filter(pk=older.id).update(created_at=newer.created_at.replace(year=2000))
        self.assertEqual([a.id for a in audits.list_audits()], [newer.id, older.id])
        audits.approve_audit(older.id)
        self.assertEqual([a.id for a in audits.list_audits('approved')], [older.id])


class InventoryAPITests(TestCase):
    """Test stock and audit endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(quantity=10)

    def test_stock_in(self):
        response = self.client.post(
            '/api/v1/stock-in/', {'product_id': str(self.product.id), 'quantity': 5, 'reason': 'restock'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['movement_type'], 'in')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 15)

    def test_stock_in_invalid_quantity(self):
        response = self.client.post(
            '/api/v1/stock-in/', {'product_id': str(self.product.id), 'quantity': 0}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_movement_list_filter(self):
        services.stock_in(self.product.id, 1)
        services.adjust_stock(self.product.id, -1)
        response = self.client.get('/api/v1/stock-movements/?movement_type=in')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_audit_workflow(self):
        response = self.client.post('/api/v1/inventory-audits/', {'notes': 'count'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        audit_id = response.data['id']
        item_id = response.data['items'][0]['id']

        response = self.client.patch(
            f'/api/v1/inventory-audits/items/{item_id}/', {'actual_quantity': 7}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['difference'], -3)

        response = self.client.post(f'/api/v1/inventory-audits/{audit_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 7)

        response = self.client.post(f'/api/v1/inventory-audits/{audit_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'audit_locked')
        response = self.client.patch(
            f'/api/v1/inventory-audits/items/{item_id}/', {'actual_quantity': 1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_audit_not_found(self):
        response = self.client.get(f'/api/v1/inventory-audits/{MISSING_ID}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.post(f'/api/v1/inventory-audits/{MISSING_ID}/approve/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.patch('/api/v1/inventory-audits/items/999999/', {'actual_quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
