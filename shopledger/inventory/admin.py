from django.contrib import admin
from .models import StockMovement, InventoryAudit, InventoryAuditItem


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['product_name', 'movement_type', 'quantity', 'reason', 'created_by', 'created_at']
    list_filter = ['movement_type', 'created_at']
    search_fields = ['product_name', 'reason']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class InventoryAuditItemInline(admin.TabularInline):
    model = InventoryAuditItem
    extra = 0
    can_delete = False
    readonly_fields = ['product_name', 'system_quantity', 'actual_quantity', 'difference']
    fields = readonly_fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(InventoryAudit)
class InventoryAuditAdmin(admin.ModelAdmin):
    list_display = ['id', 'audit_date', 'status', 'created_by', 'approved_at', 'approved_by']
    list_filter = ['status', 'audit_date']
    readonly_fields = ['status', 'created_at', 'approved_at', 'approved_by']
    inlines = [InventoryAuditItemInline]
