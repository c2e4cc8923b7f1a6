"""
Failures raised by the engine services.

Unknown ids are not errors: services return ``None``/``False`` for them.
Everything in this module is a rejected operation the caller can recover
from; nothing here is retried.
"""
from rest_framework import status


class ServiceError(Exception):
    """Base class for rejected engine operations."""
    code = 'service_error'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_dict(self):
        data = {'error': self.code, 'message': self.message}
        if self.details:
            data['details'] = self.details
        return data


class ValidationFailed(ServiceError):
    """Input violates a precondition (empty name, non-positive amount, ...)."""
    code = 'validation_failed'
    status_code = status.HTTP_400_BAD_REQUEST


class BalanceNotZero(ServiceError):
    """A party with an outstanding balance cannot be deleted."""
    code = 'balance_not_zero'
    status_code = status.HTTP_409_CONFLICT


class AuditLocked(ServiceError):
    """The inventory audit is no longer a draft."""
    code = 'audit_locked'
    status_code = status.HTTP_409_CONFLICT


class InsufficientStock(ServiceError):
    """Checkout would drive stock below zero while negative stock is disallowed."""
    code = 'insufficient_stock'
    status_code = status.HTTP_409_CONFLICT


class ImmutableRecord(ServiceError):
    """Invoices, ledger lines and movements are append-only."""
    code = 'immutable_record'
    status_code = status.HTTP_409_CONFLICT
