from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'purchase_price', 'sale_price', 'quantity', 'minimum_quantity', 'created_at']
    search_fields = ['name']
    ordering = ['name']
    # Stock is changed through stock-in, checkout and audits only
    readonly_fields = ['quantity', 'created_at', 'updated_at']
