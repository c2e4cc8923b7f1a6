"""Utility functions for audit logging and service error responses"""
import logging
import uuid
from decimal import Decimal, InvalidOperation

from rest_framework import status
from rest_framework.response import Response

from .exceptions import ValidationFailed
from .models import AuditLog

logger = logging.getLogger(__name__)


def create_audit_log(action=None, model_name=None, object_id=None, changes=None,
                     user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        action: Action type (create, invoice_checkout, stock_in, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: User performing the action, if known
        object_name: Human-readable name of the object (e.g., product name, invoice number)
        object_reference: Reference identifier (e.g., invoice number, audit id)
    """
    if not action or not model_name or not object_id:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    try:
        return AuditLog.objects.create(
            user=user if user is not None and user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def error_response(exc):
    """Translate a ServiceError into the API error body"""
    return Response(exc.as_dict(), status=exc.status_code)


def not_found_response(model_name):
    return Response(
        {'error': 'not_found', 'message': f'{model_name} not found'},
        status=status.HTTP_404_NOT_FOUND,
    )


def to_decimal(value, field, max_digits=14):
    """Parse a money value, rejecting anything that is not a finite number
    or does not fit a column of ``max_digits`` digits with two decimal places"""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationFailed(f'{field} must be a number', field=field)
    if not result.is_finite():
        raise ValidationFailed(f'{field} must be a number', field=field)
    try:
        result = result.quantize(Decimal('0.01'))
    except InvalidOperation:
        raise ValidationFailed(f'{field} is out of range', field=field)
    if max_digits is not None and len(result.as_tuple().digits) > max_digits:
        raise ValidationFailed(f'{field} is out of range', field=field)
    return result


def to_int(value, field):
    """Parse an integer count; floats with a fractional part are rejected"""
    if isinstance(value, bool):
        raise ValidationFailed(f'{field} must be a whole number', field=field)
    if isinstance(value, int):
        return value
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed(f'{field} must be a whole number', field=field)
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationFailed(f'{field} must be a whole number', field=field)
    return int(number)


def parse_id(value):
    """Return the UUID for an opaque id, or None when it cannot be one"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None
