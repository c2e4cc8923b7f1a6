from django.urls import path
from .views import checkout, invoice_list, invoice_detail

urlpatterns = [
    path('checkout/', checkout, name='checkout'),
    path('invoices/', invoice_list, name='invoice-list'),
    path('invoices/<uuid:pk>/', invoice_detail, name='invoice-detail'),
]
