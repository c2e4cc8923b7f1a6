"""
Test suite for the Parties module
Tests: customer/supplier CRUD, ledger postings, balance invariants, deletion guard and API endpoints
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework import status

from shopledger.core.exceptions import BalanceNotZero, ImmutableRecord, ValidationFailed
from shopledger.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopledger.parties.models import Customer, Supplier, CustomerTransaction, SupplierTransaction
from shopledger.parties.services import customer_ledger, supplier_ledger


class LedgerServiceTests(TestCase):
    """Test the ledger manager for both kinds of party"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer()
        self.supplier = TestDataFactory.create_supplier()

    def assertBalanceMatchesLedger(self, ledger, party):
        party.refresh_from_db()
        self.assertEqual(party.balance, ledger.ledger_balance(party.id))

    def test_create_starts_at_zero(self):
        customer = customer_ledger.create('Alice', '555', 'Main St')
        self.assertEqual(customer.balance, Decimal('0.00'))
        self.assertEqual(customer.address, 'Main St')

    def test_create_rejects_empty_name(self):
        with self.assertRaises(ValidationFailed):
            supplier_ledger.create('')

    def test_out_of_range_amount_rejected(self):
        for amount in ('1e30', '1000000000000.00'):
            with self.assertRaises(ValidationFailed):
                customer_ledger.add_payment(self.customer.id, amount)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('0.00'))
        self.assertFalse(CustomerTransaction.objects.exists())

    def test_update_cannot_touch_balance(self):
        with self.assertRaises(ValidationFailed):
            customer_ledger.update(self.customer.id, balance=100)
        updated = customer_ledger.update(self.customer.id, phone='123')
        self.assertEqual(updated.phone, '123')
        self.assertEqual(updated.balance, Decimal('0.00'))

    def test_update_unknown(self):
        self.assertIsNone(customer_ledger.update('00000000-0000-0000-0000-000000000000', name='X'))

    def test_customer_sign_convention(self):
        customer_ledger.add_charge(self.customer.id, '100.00', 'Sale')
        customer_ledger.add_payment(self.customer.id, '40.00', 'cash collection')
        customer_ledger.add_adjustment(self.customer.id, '-5.00', 'discount')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('55.00'))
        amounts = sorted(customer_ledger.list_transactions(self.customer.id).values_list('amount', flat=True))
        self.assertEqual(amounts, [Decimal('-40.00'), Decimal('-5.00'), Decimal('100.00')])
        self.assertBalanceMatchesLedger(customer_ledger, self.customer)

    def test_supplier_sign_convention(self):
        supplier_ledger.add_charge(self.supplier.id, '70.00', 'Purchase')
        supplier_ledger.add_payment(self.supplier.id, '20.00', 'Paid')
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.balance, Decimal('50.00'))
        types = set(supplier_ledger.list_transactions(self.supplier.id).values_list('transaction_type', flat=True))
        self.assertEqual(types, {'purchase', 'payment'})
        self.assertBalanceMatchesLedger(supplier_ledger, self.supplier)

    def test_balance_matches_ledger_after_every_posting(self):
        postings = [
            (customer_ledger.add_charge, '12.50'),
            (customer_ledger.add_payment, '2.50'),
            (customer_ledger.add_adjustment, '3.00'),
            (customer_ledger.add_charge, '0.01'),
            (customer_ledger.add_payment, '13.01'),
        ]
        for post, amount in postings:
            post(self.customer.id, amount, 'posting')
            self.assertBalanceMatchesLedger(customer_ledger, self.customer)
        self.assertEqual(self.customer.balance, Decimal('0.00'))

    def test_non_positive_amounts_rejected(self):
        for amount in ('0', '-1'):
            with self.assertRaises(ValidationFailed):
                customer_ledger.add_payment(self.customer.id, amount)
            with self.assertRaises(ValidationFailed):
                supplier_ledger.add_charge(self.supplier.id, amount)
        with self.assertRaises(ValidationFailed):
            customer_ledger.add_adjustment(self.customer.id, '0')
        self.assertEqual(CustomerTransaction.objects.count(), 0)
        self.assertEqual(SupplierTransaction.objects.count(), 0)

    def test_posting_to_unknown_party(self):
        self.assertIsNone(customer_ledger.add_payment('00000000-0000-0000-0000-000000000000', '1.00'))
        self.assertIsNone(customer_ledger.adjust_balance('00000000-0000-0000-0000-000000000000', '1.00'))
        self.assertEqual(CustomerTransaction.objects.count(), 0)

    def test_delete_with_zero_balance(self):
        self.assertTrue(customer_ledger.delete(self.customer.id))
        self.assertFalse(Customer.objects.filter(pk=self.customer.id).exists())
        self.assertFalse(customer_ledger.delete(self.customer.id))

    def test_delete_with_balance_rejected(self):
        supplier_ledger.add_charge(self.supplier.id, '50.00', 'Purchase')
        with self.assertRaises(BalanceNotZero):
            supplier_ledger.delete(self.supplier.id)
        supplier = Supplier.objects.get(pk=self.supplier.id)
        self.assertEqual(supplier.balance, Decimal('50.00'))
        self.assertEqual(supplier.name, self.supplier.name)

    def test_delete_after_settling_keeps_history(self):
        customer_ledger.add_charge(self.customer.id, '10.00')
        customer_ledger.add_payment(self.customer.id, '10.00')
        self.assertTrue(customer_ledger.delete(self.customer.id))
        self.assertEqual(CustomerTransaction.objects.filter(customer_id=self.customer.id).count(), 2)

    def test_transactions_are_append_only(self):
        entry = customer_ledger.add_charge(self.customer.id, '10.00')
        entry.amount = Decimal('1.00')
        with self.assertRaises(ImmutableRecord):
            entry.save()
        with self.assertRaises(ImmutableRecord):
            entry.delete()

    def test_verify_balances_reports_drift(self):
        customer_ledger.add_charge(self.customer.id, '10.00')
        self.assertEqual(customer_ledger.verify_balances(), [])
        Customer.objects.filter(pk=self.customer.id).update(balance=Decimal('3.00'))
        drifted = customer_ledger.verify_balances()
        self.assertEqual(len(drifted), 1)
        party, stored, expected = drifted[0]
        self.assertEqual(party.id, self.customer.id)
        self.assertEqual(stored, Decimal('3.00'))
        self.assertEqual(expected, Decimal('10.00'))

    def test_list_search(self):
        customer_ledger.create('Zed Traders', '0101')
        names = [c.name for c in customer_ledger.list(search='zed')]
        self.assertEqual(names, ['Zed Traders'])


class RepairPartyBalancesCommandTests(TestCase):
    """Test the repair_party_balances management command"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer()
        customer_ledger.add_charge(self.customer.id, '25.00')
        Customer.objects.filter(pk=self.customer.id).update(balance=Decimal('0.00'))

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('repair_party_balances', '--dry-run', stdout=out)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('0.00'))
        self.assertIn('DRY RUN', out.getvalue())

    def test_repair_fixes_balance(self):
        call_command('repair_party_balances', '--party', 'customers', stdout=StringIO())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal('25.00'))
        self.assertEqual(customer_ledger.verify_balances(), [])


class PartyAPITests(TestCase):
    """Test customer and supplier endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Bob', 'phone': '777'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['balance']), Decimal('0.00'))

    def test_create_customer_empty_name(self):
        response = self.client.post('/api/v1/customers/', {'name': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_balance_rejected(self):
        customer = TestDataFactory.create_customer()
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'balance': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_payment(self):
        customer = TestDataFactory.create_customer()
        customer_ledger.add_charge(customer.id, '100.00', 'Sale')
        response = self.client.post(
            f'/api/v1/customers/{customer.id}/payments/', {'amount': '40.00', 'description': 'cash collection'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['amount']), Decimal('-40.00'))
        self.assertEqual(response.data['transaction_type'], 'payment')
        customer.refresh_from_db()
        self.assertEqual(customer.balance, Decimal('60.00'))

    def test_payment_to_unknown_customer(self):
        response = self.client.post(
            '/api/v1/customers/00000000-0000-0000-0000-000000000000/payments/', {'amount': '1.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_zero_payment_rejected(self):
        customer = TestDataFactory.create_customer()
        response = self.client.post(f'/api/v1/customers/{customer.id}/payments/', {'amount': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_failed')

    def test_supplier_purchase_and_adjustment(self):
        supplier = TestDataFactory.create_supplier()
        self.client.post(f'/api/v1/suppliers/{supplier.id}/purchases/', {'amount': '30.00'}, format='json')
        self.client.post(f'/api/v1/suppliers/{supplier.id}/adjustments/', {'amount': '-5.00'}, format='json')
        response = self.client.get(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(Decimal(response.data['balance']), Decimal('25.00'))
        response = self.client.get(f'/api/v1/suppliers/{supplier.id}/transactions/')
        self.assertEqual(len(response.data), 2)

    def test_delete_supplier_with_balance_conflict(self):
        supplier = TestDataFactory.create_supplier()
        supplier_ledger.add_charge(supplier.id, '50.00')
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'balance_not_zero')
        self.assertTrue(Supplier.objects.filter(pk=supplier.id).exists())

    def test_delete_customer(self):
        customer = TestDataFactory.create_customer()
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_transaction_list_filter(self):
        first = TestDataFactory.create_customer()
        second = TestDataFactory.create_customer()
        customer_ledger.add_charge(first.id, '1.00')
        customer_ledger.add_charge(second.id, '2.00')
        response = self.client.get('/api/v1/customer-transactions/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get(f'/api/v1/customer-transactions/?customer={first.id}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(Decimal(response.data[0]['amount']), Decimal('1.00'))
