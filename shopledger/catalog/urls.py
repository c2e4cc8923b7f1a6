from django.urls import path
from .views import product_list_create, product_detail, product_low_stock, product_adjust_quantity

urlpatterns = [
    path('products/', product_list_create, name='product-list-create'),
    path('products/low-stock/', product_low_stock, name='product-low-stock'),
    path('products/<uuid:pk>/', product_detail, name='product-detail'),
    path('products/<uuid:pk>/adjust-quantity/', product_adjust_quantity, name='product-adjust-quantity'),
]
