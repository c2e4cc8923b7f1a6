from django.contrib.auth.models import AbstractUser
from django.db import models

from .exceptions import ImmutableRecord


class User(AbstractUser):
    """Extended user model with additional fields"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class Sequence(models.Model):
    """Named monotonic counters (e.g. the invoice number counter)"""
    key = models.CharField(max_length=100, unique=True)
    value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.key}={self.value}"

    class Meta:
        db_table = 'sequences'


class AuditLog(models.Model):
    """Audit log for engine mutations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stock_adjust', 'Stock Adjustment'),
        ('stock_in', 'Stock In'),
        ('invoice_checkout', 'Invoice Checkout'),
        ('payment_add', 'Payment Added'),
        ('ledger_charge', 'Ledger Charge'),
        ('ledger_adjust', 'Ledger Adjustment'),
        ('audit_create', 'Inventory Audit Created'),
        ('audit_approve', 'Inventory Audit Approved'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, invoice number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., invoice number, audit id)")
    changes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_e8e4a1_idx'),
            models.Index(fields=['action'], name='audit_logs_action_7c0b5d_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_3f9a2c_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__5d1e7b_idx'),
        ]


class AppendOnlyModel(models.Model):
    """Base for records that are written once and never changed or removed"""

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecord(f'{self.__class__.__name__} records cannot be modified')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecord(f'{self.__class__.__name__} records cannot be deleted')

    class Meta:
        abstract = True
