from django.contrib import admin
from .models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = ['product_name', 'quantity', 'unit_price', 'purchase_price', 'profit']
    fields = readonly_fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """Invoices are created through checkout only"""
    list_display = ['invoice_number', 'invoice_date', 'payment_type', 'customer_name', 'total_amount', 'total_profit', 'created_by']
    list_filter = ['payment_type', 'invoice_date']
    search_fields = ['invoice_number', 'customer_name']
    ordering = ['-invoice_number']
    date_hierarchy = 'invoice_date'
    inlines = [InvoiceItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
