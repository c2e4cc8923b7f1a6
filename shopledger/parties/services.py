"""
Ledger manager for customers and suppliers.

One ``LedgerManager`` class serves both parties. ``balance`` is changed only
by ``adjust_balance`` and every posting pairs that change with a ledger line
of the same signed amount inside one transaction, so a party balance always
equals the sum of its transactions.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from shopledger.core.exceptions import BalanceNotZero, ValidationFailed
from shopledger.core.utils import parse_id, to_decimal
from .models import (
    Customer, CustomerTransaction, CustomerTransactionType,
    Supplier, SupplierTransaction, SupplierTransactionType,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'phone', 'address')


class LedgerManager:
    """Party CRUD plus balance postings for one kind of party."""

    def __init__(self, party_model, transaction_model, party_field, transaction_types, charge_type):
        self.party_model = party_model
        self.transaction_model = transaction_model
        self.party_field = party_field
        self.transaction_types = transaction_types
        self.charge_type = charge_type

    @property
    def label(self):
        return self.party_model.__name__

    def _clean_name(self, name):
        name = (name or '').strip()
        if not name:
            raise ValidationFailed(f'{self.label} name is required', field='name')
        return name

    # Party CRUD

    def create(self, name, phone='', address=''):
        party = self.party_model.objects.create(
            name=self._clean_name(name),
            phone=(phone or '').strip(),
            address=(address or '').strip(),
        )
        logger.info(f"{self.label} created: {party.id} '{party.name}'")
        return party

    def get(self, party_id):
        pk = parse_id(party_id)
        if pk is None:
            return None
        return self.party_model.objects.filter(pk=pk).first()

    def list(self, search=None):
        queryset = self.party_model.objects.all()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(phone__icontains=search))
        return queryset

    def update(self, party_id, **fields):
        """Merge name/phone/address; the balance only moves through postings"""
        if 'balance' in fields:
            raise ValidationFailed('balance can only be changed through ledger postings', field='balance')
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailed(f"Unknown {self.label.lower()} fields: {', '.join(sorted(unknown))}")

        party = self.get(party_id)
        if party is None:
            return None
        if 'name' in fields:
            party.name = self._clean_name(fields['name'])
        if 'phone' in fields:
            party.phone = (fields['phone'] or '').strip()
        if 'address' in fields:
            party.address = (fields['address'] or '').strip()
        party.save(update_fields=[*fields.keys(), 'updated_at'])
        return party

    def delete(self, party_id):
        with transaction.atomic():
            pk = parse_id(party_id)
            party = self.party_model.objects.select_for_update().filter(pk=pk).first() if pk else None
            if party is None:
                return False
            if party.balance != 0:
                raise BalanceNotZero(
                    f'{self.label} has an outstanding balance of {party.balance}',
                    balance=str(party.balance),
                )
            party.delete()
        logger.info(f"{self.label} deleted: {party_id}")
        return True

    # Balance and ledger lines

    def adjust_balance(self, party_id, amount):
        """Add a signed amount to the balance in a single UPDATE"""
        amount = to_decimal(amount, 'amount')
        pk = parse_id(party_id)
        if pk is None:
            return None
        updated = self.party_model.objects.filter(pk=pk).update(
            balance=F('balance') + amount, updated_at=timezone.now()
        )
        if not updated:
            return None
        return self.party_model.objects.get(pk=pk)

    def record_transaction(self, party_id, amount, transaction_type, description='', date=None,
                           user=None, **links):
        if transaction_type not in self.transaction_types.values:
            raise ValidationFailed(f'Invalid transaction type: {transaction_type}', field='transaction_type')
        return self.transaction_model.objects.create(
            **{f'{self.party_field}_id': parse_id(party_id)},
            amount=to_decimal(amount, 'amount'),
            transaction_type=transaction_type,
            description=description or '',
            date=date or timezone.now(),
            created_by=user if user is not None and user.is_authenticated else None,
            **links,
        )

    def post(self, party_id, amount, transaction_type, description='', date=None, user=None, **links):
        """Adjust the balance and append the matching ledger line as one unit.

        Returns the new transaction, or None when the party does not exist.
        """
        amount = to_decimal(amount, 'amount')
        pk = parse_id(party_id)
        if pk is None:
            return None
        with transaction.atomic():
            if not self.party_model.objects.select_for_update().filter(pk=pk).exists():
                return None
            self.adjust_balance(pk, amount)
            entry = self.record_transaction(pk, amount, transaction_type, description, date, user, **links)
        logger.info(f"{self.label} {pk}: posted {transaction_type} {amount}")
        return entry

    def add_charge(self, party_id, amount, description='', date=None, user=None, **links):
        """Sale to a customer or purchase from a supplier (+amount)"""
        amount = self._positive(amount)
        return self.post(party_id, amount, self.charge_type, description, date, user, **links)

    def add_payment(self, party_id, amount, description='', date=None, user=None):
        amount = self._positive(amount)
        return self.post(party_id, -amount, self.transaction_types.PAYMENT, description, date, user)

    def add_adjustment(self, party_id, amount, description='', date=None, user=None):
        amount = to_decimal(amount, 'amount')
        if amount == 0:
            raise ValidationFailed('Adjustment amount cannot be zero', field='amount')
        return self.post(party_id, amount, self.transaction_types.ADJUSTMENT, description, date, user)

    def _positive(self, amount):
        amount = to_decimal(amount, 'amount')
        if amount <= 0:
            raise ValidationFailed('Amount must be greater than zero', field='amount')
        return amount

    # History and verification

    def list_transactions(self, party_id=None, transaction_type=None):
        queryset = self.transaction_model.objects.all().order_by('created_at', 'date')
        if party_id is not None:
            queryset = queryset.filter(**{f'{self.party_field}_id': parse_id(party_id)})
        if transaction_type:
            queryset = queryset.filter(transaction_type=transaction_type)
        return queryset

    def ledger_balance(self, party_id):
        total = self.list_transactions(party_id).aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')

    def verify_balances(self):
        """(party, stored balance, ledger sum) for every party whose balance drifted"""
        party_key = f'{self.party_field}_id'
        sums = dict(
            self.transaction_model.objects.order_by()
            .values(party_key)
            .annotate(total=Sum('amount'))
            .values_list(party_key, 'total')
        )
        drifted = []
        for party in self.party_model.objects.all():
            expected = sums.get(party.id) or Decimal('0.00')
            if party.balance != expected:
                drifted.append((party, party.balance, expected))
        return drifted

    def total_balance(self):
        return self.party_model.objects.aggregate(total=Sum('balance'))['total'] or Decimal('0.00')


customer_ledger = LedgerManager(
    Customer, CustomerTransaction, 'customer', CustomerTransactionType, CustomerTransactionType.SALE
)
supplier_ledger = LedgerManager(
    Supplier, SupplierTransaction, 'supplier', SupplierTransactionType, SupplierTransactionType.PURCHASE
)
