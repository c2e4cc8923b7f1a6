from django.urls import path
from .views import (
    stock_in, stock_movement_list,
    audit_list_create, audit_detail, audit_item_update, audit_approve,
)

urlpatterns = [
    # Stock movement endpoints
    path('stock-in/', stock_in, name='stock-in'),
    path('stock-movements/', stock_movement_list, name='stock-movement-list'),

    # Inventory audit endpoints
    path('inventory-audits/', audit_list_create, name='inventory-audit-list-create'),
    path('inventory-audits/items/<int:item_id>/', audit_item_update, name='inventory-audit-item-update'),
    path('inventory-audits/<uuid:pk>/', audit_detail, name='inventory-audit-detail'),
    path('inventory-audits/<uuid:pk>/approve/', audit_approve, name='inventory-audit-approve'),
]
