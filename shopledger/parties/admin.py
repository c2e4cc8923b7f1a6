from django.contrib import admin
from .models import Customer, Supplier, CustomerTransaction, SupplierTransaction


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'balance', 'created_at']
    search_fields = ['name', 'phone']
    ordering = ['name']
    readonly_fields = ['balance', 'created_at', 'updated_at']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'balance', 'created_at']
    search_fields = ['name', 'phone']
    ordering = ['name']
    readonly_fields = ['balance', 'created_at', 'updated_at']


class LedgerTransactionAdmin(admin.ModelAdmin):
    """Ledger lines are append-only; the admin only shows them"""
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['description']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CustomerTransaction)
class CustomerTransactionAdmin(LedgerTransactionAdmin):
    list_display = ['id', 'customer', 'transaction_type', 'amount', 'description', 'invoice', 'created_at']


@admin.register(SupplierTransaction)
class SupplierTransactionAdmin(LedgerTransactionAdmin):
    list_display = ['id', 'supplier', 'transaction_type', 'amount', 'description', 'stock_movement', 'created_at']
