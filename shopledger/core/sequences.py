from django.db import transaction
from django.db.models import F

from .models import Sequence

INVOICE_SEQUENCE = 'invoice'


def next_value(key):
    """Atomically increment the named counter and return its new value.

    The increment happens in the database (``F()`` update) inside the
    caller's transaction, so two concurrent callers never get the same
    number and a rolled back caller releases nothing that was committed.
    """
    with transaction.atomic():
        Sequence.objects.get_or_create(key=key)
        Sequence.objects.filter(key=key).update(value=F('value') + 1)
        return Sequence.objects.values_list('value', flat=True).get(key=key)


def current_value(key):
    return Sequence.objects.filter(key=key).values_list('value', flat=True).first() or 0
