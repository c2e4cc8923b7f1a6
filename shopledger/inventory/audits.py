"""
Inventory audit workflow: draft -> approved.

An audit snapshots every product's quantity. Counts are entered while the
audit is a draft; approval sets each product with a difference to its counted
quantity and records an adjustment movement for it. Approved audits never
change again.
"""
import logging

from django.db import transaction
from django.utils import timezone

from shopledger.catalog import services as catalog_services
from shopledger.catalog.models import Product
from shopledger.core.exceptions import AuditLocked, ValidationFailed
from shopledger.core.utils import parse_id, to_int
from .models import AuditStatus, InventoryAudit, InventoryAuditItem, MovementType
from .services import record_movement

logger = logging.getLogger(__name__)


def _user_or_none(user):
    return user if user is not None and user.is_authenticated else None


def create_audit(notes='', user=None):
    with transaction.atomic():
        audit = InventoryAudit.objects.create(notes=notes or '', created_by=_user_or_none(user))
        InventoryAuditItem.objects.bulk_create([
            InventoryAuditItem(
                audit=audit,
                product_id=product.id,
                product_name=product.name,
                system_quantity=product.quantity,
                actual_quantity=product.quantity,
                difference=0,
            )
            for product in Product.objects.all()
        ])
    logger.info(f"Inventory audit created: {audit.id} ({audit.items.count()} items)")
    return audit


def get_audit(audit_id):
    pk = parse_id(audit_id)
    if pk is None:
        return None
    return InventoryAudit.objects.filter(pk=pk).first()


def list_audits(status=None):
    queryset = InventoryAudit.objects.all().order_by('-created_at')
    if status:
        queryset = queryset.filter(status=status)
    return queryset


def audit_items(audit_id):
    return InventoryAuditItem.objects.filter(audit_id=parse_id(audit_id)).order_by('id')


def _item_pk(item_id):
    try:
        return int(str(item_id))
    except ValueError:
        return None


def update_item(item_id, actual_quantity):
    """Record the counted quantity for one item of a draft audit"""
    pk = _item_pk(item_id)
    if pk is None:
        return None
    actual_quantity = to_int(actual_quantity, 'actual_quantity')
    if actual_quantity < 0:
        raise ValidationFailed('Counted quantity cannot be negative', field='actual_quantity')

    with transaction.atomic():
        item = InventoryAuditItem.objects.select_for_update().filter(pk=pk).first()
        if item is None:
            return None
        # Lock the parent so approval cannot interleave with the edit
        audit = InventoryAudit.objects.select_for_update().get(pk=item.audit_id)
        if audit.status != AuditStatus.DRAFT:
            raise AuditLocked('Inventory audit is already approved', audit_id=str(audit.id))

        item.actual_quantity = actual_quantity
        item.difference = actual_quantity - item.system_quantity
        item.save(update_fields=['actual_quantity', 'difference'])
    return item


def approve_audit(audit_id, user=None):
    """Approve a draft audit and commit its differences to inventory.

    Returns None for an unknown audit. Items whose product was deleted after
    the snapshot are skipped.
    """
    pk = parse_id(audit_id)
    if pk is None:
        return None

    with transaction.atomic():
        audit = InventoryAudit.objects.select_for_update().filter(pk=pk).first()
        if audit is None:
            return None
        if audit.status != AuditStatus.DRAFT:
            raise AuditLocked('Inventory audit is already approved', audit_id=str(audit.id))

        adjusted = 0
        for item in audit.items.exclude(difference=0).order_by('id'):
            current = Product.objects.select_for_update().filter(pk=item.product_id).first()
            if current is None:
                logger.warning(f"Audit {audit.id}: product {item.product_id} '{item.product_name}' no longer exists, skipped")
                continue
            # Stock may have moved since the snapshot; log the change actually applied
            delta = item.actual_quantity - current.quantity
            if delta == 0:
                continue
            product = catalog_services.set_quantity(current.id, item.actual_quantity)
            record_movement(product, delta, MovementType.ADJUSTMENT,
                            f"Inventory audit {audit.id}", user)
            adjusted += 1

        audit.status = AuditStatus.APPROVED
        audit.approved_at = timezone.now()
        audit.approved_by = _user_or_none(user)
        audit.save(update_fields=['status', 'approved_at', 'approved_by'])

    logger.info(f"Inventory audit approved: {audit.id} ({adjusted} products adjusted)")
    return audit
