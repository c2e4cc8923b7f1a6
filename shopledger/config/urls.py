"""
URL configuration for the shopledger project.

Every engine endpoint lives under ``api/v1/``; the admin site is kept for
back-office inspection of the persisted records.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Shopledger Admin Panel"
admin.site.site_title = "Shopledger Admin Portal"
admin.site.index_title = "Inventory & ledger administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('shopledger.core.urls')),
    path('api/v1/', include('shopledger.catalog.urls')),
    path('api/v1/', include('shopledger.parties.urls')),
    path('api/v1/', include('shopledger.inventory.urls')),
    path('api/v1/', include('shopledger.pos.urls')),
    path('api/v1/', include('shopledger.reports.urls')),
]
