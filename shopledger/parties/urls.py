from django.urls import path
from .views import (
    customer_list_create, customer_detail, customer_payment, customer_adjustment,
    customer_transactions, customer_transaction_list,
    supplier_list_create, supplier_detail, supplier_payment, supplier_purchase,
    supplier_adjustment, supplier_transactions, supplier_transaction_list,
)

urlpatterns = [
    # Customer endpoints
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/<uuid:pk>/', customer_detail, name='customer-detail'),
    path('customers/<uuid:pk>/payments/', customer_payment, name='customer-payment'),
    path('customers/<uuid:pk>/adjustments/', customer_adjustment, name='customer-adjustment'),
    path('customers/<uuid:pk>/transactions/', customer_transactions, name='customer-transactions'),
    path('customer-transactions/', customer_transaction_list, name='customer-transaction-list'),

    # Supplier endpoints
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/<uuid:pk>/', supplier_detail, name='supplier-detail'),
    path('suppliers/<uuid:pk>/payments/', supplier_payment, name='supplier-payment'),
    path('suppliers/<uuid:pk>/purchases/', supplier_purchase, name='supplier-purchase'),
    path('suppliers/<uuid:pk>/adjustments/', supplier_adjustment, name='supplier-adjustment'),
    path('suppliers/<uuid:pk>/transactions/', supplier_transactions, name='supplier-transactions'),
    path('supplier-transactions/', supplier_transaction_list, name='supplier-transaction-list'),
]
